"""
Naming utilities for safe code generation.

Handles name sanitization, case conversions, keyword conflicts, and the
short local variable names templates use for receivers and parameters.
"""

import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set
from enum import Enum

from .types import TypeRegistry

DEFAULT_CONFLICT_SUFFIX = "Val"


class NamingCase(Enum):
    """Different naming case styles."""
    SNAKE_CASE = "snake"      # user_name
    CAMEL_CASE = "camel"      # userName
    PASCAL_CASE = "pascal"    # UserName
    KEBAB_CASE = "kebab"      # user-name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None,
                 initialisms: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
            initialisms: Words kept fully upper-case in camel/pascal names (e.g. ID)
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self.initialisms = {w.upper() for w in (initialisms or set())}
        self._name_cache: Dict[str, str] = {}
        self._used_names: Set[str] = set()

    def convert(self, name: str, target_case: NamingCase = NamingCase.SNAKE_CASE) -> str:
        """Clean and case-convert a name without conflict tracking."""
        return self._convert_case(self._clean_basic(name), target_case)

    def sanitize_name(self, name: str, target_case: NamingCase = NamingCase.SNAKE_CASE,
                      suffix_on_conflict: str = DEFAULT_CONFLICT_SUFFIX) -> str:
        """
        Sanitize a name for safe use in target language.

        The same input always maps to the same output for one sanitizer;
        distinct inputs that convert to the same identifier get the conflict
        suffix appended until the name is free.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for conflicts

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{target_case.value}_{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        converted = self.convert(name, target_case)
        final_name = self._resolve_conflicts(converted, suffix_on_conflict)

        self._name_cache[cache_key] = final_name
        self._used_names.add(final_name)

        return final_name

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r'[^a-zA-Z0-9_-]', '_', name)
        cleaned = cleaned.strip('_-')

        if cleaned and cleaned[0].isdigit():
            cleaned = f"_{cleaned}"

        if not cleaned:
            cleaned = "field"

        return cleaned

    def _convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return self._to_snake_case(name)
        elif target_case == NamingCase.CAMEL_CASE:
            return self._to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            return self._to_pascal_case(name)
        elif target_case == NamingCase.KEBAB_CASE:
            return self._to_kebab_case(name)
        elif target_case == NamingCase.SCREAMING_SNAKE:
            return self._to_snake_case(name).upper()
        else:
            return name

    def _to_snake_case(self, name: str) -> str:
        """Convert to snake_case."""
        name = name.replace('-', '_')
        name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
        name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
        name = name.lower()
        name = re.sub(r'_+', '_', name)
        return name.strip('_')

    def _word(self, part: str) -> str:
        if part.upper() in self.initialisms:
            return part.upper()
        return part.capitalize()

    def _to_camel_case(self, name: str) -> str:
        """Convert to camelCase."""
        parts = [p for p in self._to_snake_case(name).split('_') if p]
        if not parts:
            return name
        return parts[0].lower() + ''.join(self._word(p) for p in parts[1:])

    def _to_pascal_case(self, name: str) -> str:
        """Convert to PascalCase."""
        parts = self._to_snake_case(name).split('_')
        return ''.join(self._word(p) for p in parts if p)

    def _to_kebab_case(self, name: str) -> str:
        """Convert to kebab-case."""
        return self._to_snake_case(name).replace('_', '-')

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words or name in self.builtin_types

    def _resolve_conflicts(self, name: str, suffix: str) -> str:
        """Resolve naming conflicts with reserved words and existing names."""
        while self.is_reserved(name) or name in self._used_names:
            name = f"{name}{suffix}"
        return name

    def reset_used_names(self):
        """Reset the tracking of used names."""
        self._used_names.clear()
        self._name_cache.clear()

    def add_used_name(self, name: str):
        """Manually add a name to the used names set."""
        self._used_names.add(name)


class ShortNameScope:
    """
    Short local variable names for one render scope.

    Each type gets its abbreviation from the type registry ("int" -> "i");
    later uses of the same abbreviation in the scope get a numeric suffix
    ("i", "i2", "i3"). A name colliding with a reserved or already used
    name gets the conflict suffix appended until it is free.
    """

    def __init__(self, types: Optional[TypeRegistry] = None,
                 conflict_suffix: str = DEFAULT_CONFLICT_SUFFIX,
                 reserved: Iterable[str] = ()):
        self.types = types or TypeRegistry()
        self.conflict_suffix = conflict_suffix or DEFAULT_CONFLICT_SUFFIX
        self.reserved = set(reserved)
        self._counts: Dict[str, int] = defaultdict(int)
        self._used: Set[str] = set()

    def reserve(self, *names: str) -> None:
        """Mark names as taken in this scope."""
        self._used.update(names)

    def name_for(self, type_name: str) -> str:
        """Return the next short name for a value of type_name."""
        base = self.types.short_name(type_name)
        self._counts[base] += 1
        count = self._counts[base]
        name = base if count == 1 else f"{base}{count}"
        return self.claim(name)

    def names_for(self, type_names: List[str]) -> List[str]:
        return [self.name_for(t) for t in type_names]

    def claim(self, name: str) -> str:
        """Claim name in the scope, appending the conflict suffix on collision."""
        while name in self.reserved or name in self._used:
            name = f"{name}{self.conflict_suffix}"
        self._used.add(name)
        return name
