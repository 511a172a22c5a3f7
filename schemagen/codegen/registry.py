"""
Template set registry.

Maps a target key (e.g. 'go', 'python') to its TemplateSet. Registration
happens once at startup through create_default_registry(); after that the
registry is only read.
"""

from typing import Any, Dict, List, Optional

from ..logging_config import get_logger
from .core.errors import DuplicateEntityError, UnknownTargetError
from .core.templates import TemplateSet

logger = get_logger(__name__)


class TemplateSetRegistry:
    """Registry of available template sets."""

    def __init__(self):
        """Initialize empty registry."""
        self._sets: Dict[str, TemplateSet] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, key: str, template_set: TemplateSet) -> None:
        """
        Register a template set for a target.

        Args:
            key: Target key (case-insensitive)
            template_set: The template set descriptor

        Raises:
            DuplicateEntityError: If the key or one of the set's aliases is taken
        """
        target_key = key.lower()
        if target_key in self._sets or target_key in self._aliases:
            raise DuplicateEntityError("target", target_key, "template set registry")

        aliases = [a.lower() for a in template_set.aliases if a.lower() != target_key]
        for alias in aliases:
            if alias in self._sets or alias in self._aliases:
                raise DuplicateEntityError("target alias", alias, "template set registry")

        self._sets[target_key] = template_set
        for alias in aliases:
            self._aliases[alias] = target_key
        logger.debug("Registered template set '%s' (aliases: %s)", target_key, aliases)

    def lookup(self, key: str) -> TemplateSet:
        """
        Get the template set for a target key or alias.

        Raises:
            UnknownTargetError: If nothing is registered under key
        """
        target_key = key.lower()
        target_key = self._aliases.get(target_key, target_key)
        if target_key not in self._sets:
            raise UnknownTargetError(key, self.list_targets())
        return self._sets[target_key]

    def list_targets(self) -> List[str]:
        """Get list of registered target keys."""
        return sorted(self._sets)

    def get_aliases(self, key: str) -> List[str]:
        target_key = key.lower()
        return sorted(a for a, t in self._aliases.items() if t == target_key)

    def is_supported(self, key: str) -> bool:
        """Check if target is supported."""
        target_key = key.lower()
        return target_key in self._sets or target_key in self._aliases

    def target_info(self, key: str) -> Dict[str, Any]:
        """
        Get information about a registered target.

        Raises:
            UnknownTargetError: If target not found
        """
        template_set = self.lookup(key)
        return {
            "name": template_set.name,
            "description": template_set.description,
            "file_extension": template_set.file_ext,
            "aliases": self.get_aliases(template_set.name),
            "flags": [
                {
                    "key": f.key,
                    "desc": f.desc,
                    "short": f.short,
                    "default": f.default,
                    "placeholder": f.placeholder,
                    "enums": list(f.enums),
                }
                for f in template_set.flags
            ],
        }


def create_default_registry() -> TemplateSetRegistry:
    """
    Create a registry holding the bundled target template sets.

    This is the single place where target plugins are enumerated.
    """
    from .languages.go import create_go_template_set
    from .languages.python import create_python_template_set

    registry = TemplateSetRegistry()
    registry.register("go", create_go_template_set())
    registry.register("python", create_python_template_set())
    return registry


_global_registry: Optional[TemplateSetRegistry] = None


def get_registry() -> TemplateSetRegistry:
    """Get the process-wide registry, creating it on first use."""
    global _global_registry
    if _global_registry is None:
        _global_registry = create_default_registry()
    return _global_registry


def lookup(key: str) -> TemplateSet:
    """Get a template set from the process-wide registry."""
    return get_registry().lookup(key)


def list_supported_targets() -> List[str]:
    """List all targets of the process-wide registry."""
    return get_registry().list_targets()
