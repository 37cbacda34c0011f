"""Data models for the declarations that receive Qt documentation."""

import re
from dataclasses import dataclass, field
from enum import Enum

# Keywords of the generated binding language that cannot be used as parameter names.
RESERVED_WORDS = frozenset(
    {
        "abstract", "as", "base", "bool", "break", "byte", "case", "catch", "char", "checked",
        "class", "const", "continue", "decimal", "default", "delegate", "do", "double", "else",
        "enum", "event", "explicit", "extern", "false", "finally", "fixed", "float", "for",
        "foreach", "goto", "if", "implicit", "in", "int", "interface", "internal", "is", "lock",
        "long", "namespace", "new", "null", "object", "operator", "out", "override", "params",
        "private", "protected", "public", "readonly", "ref", "return", "sbyte", "sealed", "short",
        "sizeof", "stackalloc", "static", "string", "struct", "switch", "this", "throw", "true",
        "try", "typeof", "uint", "ulong", "unchecked", "unsafe", "ushort", "using", "virtual",
        "void", "volatile", "while",
    }
)  # fmt: skip


def safe_identifier(name: str) -> str:
    """Turn a name taken from documentation into a usable identifier.

    Args:
        name: Raw identifier text.

    Returns:
        The identifier with invalid characters replaced and reserved words escaped.
    """
    identifier = re.sub(r"\W", "_", name)
    if identifier[:1].isdigit():
        identifier = f"_{identifier}"
    if identifier in RESERVED_WORDS:
        return f"@{identifier}"
    return identifier


@dataclass
class Comment:
    """Documentation attached to a declaration."""

    brief_text: str = ""
    text: str | None = None


@dataclass
class ObsoleteMarker:
    """Marks a declaration as deprecated, optionally with a replacement hint."""

    message: str | None = None
    kind: str = "Obsolete"


@dataclass
class TypeDef:
    """A typedef known to the declaration model.

    ``type_name`` is the printed underlying type, ``original_name`` the
    spelling of the typedef itself. Dependent and injected template names
    have no stable printed identity and are flagged as ``dependent``.
    """

    original_name: str
    type_name: str
    dependent: bool = False


@dataclass(eq=False)
class DeclarationContext:
    """A scope that can own declarations."""

    name: str = ""
    namespace: "DeclarationContext | None" = None
    macro_expansions: list[str] = field(default_factory=list)


@dataclass(eq=False)
class TranslationUnit(DeclarationContext):
    """A header file; the anonymous global scope of its declarations."""

    file_name: str = ""


@dataclass(eq=False)
class Namespace(DeclarationContext):
    """A C++ namespace such as ``Qt``."""


@dataclass(eq=False)
class Class(DeclarationContext):
    """A class, struct or interface."""

    is_interface: bool = False
    comment: Comment | None = None


@dataclass(eq=False)
class Declaration:
    """Base of every documentable declaration."""

    name: str
    namespace: DeclarationContext | None = None
    comment: Comment | None = None


class ParameterKind(Enum):
    """How a parameter takes part in a call."""

    REGULAR = "regular"
    IMPLICIT = "implicit"


@dataclass(eq=False)
class Parameter:
    """A function parameter; ``type`` is the printed C++ type."""

    name: str
    type: str
    kind: ParameterKind = ParameterKind.REGULAR
    is_variadic: bool = False


@dataclass(eq=False)
class Function(Declaration):
    """A free function or method."""

    parameters: list[Parameter] = field(default_factory=list)
    original_name: str = ""
    attributes: list[ObsoleteMarker] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Default the original name to the name."""
        if not self.original_name:
            self.original_name = self.name

    @property
    def regular_parameters(self) -> list[Parameter]:
        """Parameters written in a C++ call, without implicit ones."""
        return [p for p in self.parameters if p.kind is ParameterKind.REGULAR]

    @property
    def is_obsolete(self) -> bool:
        """Whether an obsolete marker is attached."""
        return any(a.kind == "Obsolete" for a in self.attributes)


@dataclass(eq=False)
class Property(Declaration):
    """A property backed by accessors, a field, or a ``Q_PROPERTY`` macro."""

    type: str = ""
    get_method: Function | None = None
    set_method: Function | None = None
    backing_field: str | None = None


@dataclass(eq=False)
class EnumerationItem(Declaration):
    """A single enumerator."""

    value: int | None = None


@dataclass(eq=False)
class Enumeration(Declaration):
    """An enum and its enumerators."""

    items: list[EnumerationItem] = field(default_factory=list)
