"""
Known-types registry shared by a template set and its runs.

Tracks which target-language type names are known (builtin, or registered
by a template set through add_type) and the abbreviation used when a local
variable of that type needs a short name.
"""

import re
from typing import Dict, Iterable, Optional


class TypeRegistry:
    """Registry of known target type names and their short names."""

    def __init__(self, known: Optional[Iterable[str]] = None,
                 short_names: Optional[Dict[str, str]] = None):
        self._known: Dict[str, bool] = {t: True for t in (known or ())}
        self._short_names: Dict[str, str] = dict(short_names or {})

    def is_known(self, type_name: str) -> bool:
        """Return True when type_name (without slice/pointer prefixes) is known."""
        return self._known.get(_base(type_name), False)

    def add_type(self, type_name: str, short_name: Optional[str] = None) -> None:
        """Register a type as known, optionally with its abbreviation."""
        self._known[type_name] = True
        if short_name:
            self._short_names[type_name] = short_name

    def short_name(self, type_name: str) -> str:
        """
        Return the abbreviation for a type.

        Unlisted types are abbreviated from the initials of their words,
        so "NullString" becomes "ns" and "time.Time" becomes "t".
        """
        base = _base(type_name)
        if base in self._short_names:
            return self._short_names[base]
        if "." in base:
            base = base.rsplit(".", 1)[1]
        words = re.findall(r"[A-Z]+(?![a-z])|[A-Z]?[a-z0-9]+", base)
        initials = "".join(w[0] for w in words if w[0].isalpha()).lower()
        return initials or "v"

    def known_types(self) -> list:
        return sorted(t for t, known in self._known.items() if known)

    def copy(self) -> "TypeRegistry":
        """Return an independent copy for one generation run."""
        return TypeRegistry(self._known, self._short_names)


def _base(type_name: str) -> str:
    return type_name.lstrip("[]*")
