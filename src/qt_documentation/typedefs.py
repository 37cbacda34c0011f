"""Registry of typedef spellings under which documentation may name a type."""

import logging
import re
from collections.abc import Iterable
from types import MappingProxyType

from qt_documentation.models import TypeDef

logger = logging.getLogger(__name__)

_PUNCTUATION_SPACE = re.compile(r"\s*(<|>|,|\*|&|::)\s*")
_SPACE = re.compile(r"\s+")


def canonical_type_name(type_name: str) -> str:
    """Normalise the whitespace of a printed type so spellings compare equal.

    Args:
        type_name: Printed C++ type.

    Returns:
        The type with no space around punctuation and single spaces elsewhere.
    """
    return _PUNCTUATION_SPACE.sub(r"\1", _SPACE.sub(" ", type_name.strip()))


class TypedefRegistry:
    """Maps a printed type to the distinct typedef names that denote it."""

    def __init__(self, aliases: dict[str, tuple[str, ...]] | None = None) -> None:
        """Initialise registry with prepared alias lists.

        Args:
            aliases: Canonical type names mapped to alias names.
        """
        self._aliases = MappingProxyType(dict(aliases or {}))

    @classmethod
    def from_typedefs(cls, typedefs: Iterable[TypeDef]) -> "TypedefRegistry":
        """Build a registry from the typedefs of the declaration model.

        A type with any dependent typedef has no stable identity and is left
        out completely.

        Args:
            typedefs: Typedef records.

        Returns:
            TypedefRegistry instance.
        """
        grouped: dict[str, list[str]] = {}
        dependent: set[str] = set()
        for typedef in typedefs:
            type_name = canonical_type_name(typedef.type_name)
            if typedef.dependent:
                dependent.add(type_name)
                continue
            names = grouped.setdefault(type_name, [])
            if typedef.original_name not in names and canonical_type_name(typedef.original_name) != type_name:
                names.append(typedef.original_name)

        aliases = {
            type_name: tuple(names) for type_name, names in grouped.items() if names and type_name not in dependent
        }
        logger.info("Registered typedef aliases for %d types", len(aliases))
        return cls(aliases)

    def aliases_for(self, type_name: str) -> tuple[str, ...]:
        """Return the typedef names registered for a type.

        Args:
            type_name: Printed C++ type without decorations.

        Returns:
            Alias names, empty when the type has none.
        """
        return self._aliases.get(canonical_type_name(type_name), ())

    def __contains__(self, type_name: object) -> bool:
        """Return whether a type has registered aliases."""
        return isinstance(type_name, str) and canonical_type_name(type_name) in self._aliases

    def __len__(self) -> int:
        """Return the number of types with aliases."""
        return len(self._aliases)
