"""Utility functions for loading schema facts documents.

A facts document is the JSON description of a schema read by FactsLoader.
This module loads one from a local file or a URL with proper error
handling and validation.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .codegen.core.errors import LoadError
from .logging_config import get_logger

logger = get_logger(__name__)


def _check_document(data: Any, source: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        logger.error(f"Facts document from {source} is not a JSON object")
        raise LoadError(
            f"Facts document must be a JSON object: {source}",
            details={"source": source},
        )
    return data


def load_facts_from_file(file_path: str | Path) -> tuple[str, dict[str, Any]]:
    """Load a facts document from a local file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        Tuple of (source description, parsed facts document).

    Raises:
        LoadError: If the file is missing, unreadable, or not a JSON object.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load facts from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise LoadError(f"File not found: {file_path}", details={"source": str(file_path)})

    if file_path.suffix.lower() != ".json":
        logger.warning(f"File does not have .json extension: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {file_path}: {e}")
        raise LoadError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise LoadError(f"Error reading file {file_path}: {e}") from e

    logger.info(f"Loaded facts from {file_path}")
    return str(file_path), _check_document(data, str(file_path))


def load_facts_from_url(url: str, timeout: int = 30) -> tuple[str, dict[str, Any]]:
    """Load a facts document from a URL.

    Args:
        url: URL to fetch the document from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed facts document).

    Raises:
        LoadError: If the URL is invalid, the request fails, or the response
            isn't a JSON object.
    """
    logger.debug(f"Attempting to load facts from URL: {url}")

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error(f"Invalid URL format: {url}")
        raise LoadError(f"Invalid URL: {url}", details={"source": url})

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

        content_type = response.headers.get("content-type", "").lower()
        if "application/json" not in content_type and not url.endswith(".json"):
            logger.warning(f"URL {url} does not have JSON content type: {content_type}")

        data = response.json()
    except requests.exceptions.Timeout as e:
        logger.error(f"Request timeout for URL: {url}")
        raise LoadError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error for URL {url}: {e}")
        raise LoadError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
        raise LoadError(
            f"HTTP error {e.response.status_code} for URL: {url}",
            details={"source": url, "status": e.response.status_code},
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request error for URL {url}: {e}")
        raise LoadError(f"Request error for URL {url}: {e}") from e
    except ValueError as e:
        # json.JSONDecodeError and requests' JSON errors are both ValueErrors
        logger.error(f"Invalid JSON response from URL {url}: {e}")
        raise LoadError(f"Invalid JSON response from URL {url}: {e}") from e

    logger.info(f"Loaded facts from {url}")
    return url, _check_document(data, url)


def is_url(source: str) -> bool:
    """Return True when source looks like an http(s) URL."""
    return urlparse(source).scheme in ("http", "https")


def load_facts(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, dict[str, Any]]:
    """Load a facts document from either a file or URL.

    Args:
        file_path: Path to local JSON file (mutually exclusive with url).
        url: URL to fetch the document from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, parsed facts document).

    Raises:
        LoadError: If neither or both parameters are provided, or loading fails.
    """
    if not file_path and not url:
        logger.error("Neither file_path nor url provided")
        raise LoadError("Either file_path or url must be provided")

    if file_path and url:
        logger.error("Both file_path and url provided")
        raise LoadError("Cannot specify both file_path and url")

    if file_path:
        return load_facts_from_file(file_path)
    return load_facts_from_url(url, timeout)
