"""Search patterns locating declarations in stripped Qt documentation pages.

Each builder turns one declaration into a compiled pattern laid out after
the qdoc page structure: member function blocks, ``Property
Documentation`` entries, enum blocks with their value tables, and the
class overview. All patterns run with ``re.DOTALL``.
"""

import re

from qt_documentation.models import Function
from qt_documentation.settings import DEFAULT_SETTINGS, MatchingSettings
from qt_documentation.signature import type_pattern
from qt_documentation.typedefs import TypedefRegistry

PARAMETER_SEPARATOR = r",\s*"

# Optional parameter name and default value after a parameter type; qdoc writes
# "const QString &name", so a name may follow a decoration without a space.
_PARAMETER_NAME = r"(?:(?:\s+|(?<=[*&\]]))\w+(?:\s*=\s*[^,\r\n]+(?:\(\s*\))?)?)?"

# A trailing "type name = default" the declaration model does not list.
_DEFAULTED_PARAMETER = r"[\w :*&<>]+\s*=\s*[^,\r\n]+(?:\(\s*\))?(?:,\s*)?"

QFLAGS_BOILERPLATE = re.compile(
    r"The \S+ type is a typedef for QFlags<\S+>\. It stores an OR combination of \S+ values\."
)
VALUE_TABLE = re.compile(r"ConstantValue(?:Description)?.*?(?:\n{2}|$)", re.DOTALL)

# Enum value tables are tab separated; hand-written pages sometimes use spaces.
ENUM_ITEM_SEPARATORS = (r"\t", r" +")


def signature_pattern(function: Function, typedefs: TypedefRegistry, complete_signature: bool = True) -> str:
    """Build the pattern for a function name and its parameter list.

    The parameter list is captured as ``args`` so parameter names can be
    recovered from it.

    Args:
        function: Function to describe.
        typedefs: Registry of typedef aliases.
        complete_signature: Whether pointer and reference decorations are required.

    Returns:
        Pattern text.
    """
    parameters = [
        type_pattern(parameter.type, typedefs, complete_signature) + _PARAMETER_NAME
        for parameter in function.regular_parameters
    ]
    if parameters:
        arguments = PARAMETER_SEPARATOR.join(parameters) + f"(?:{PARAMETER_SEPARATOR}{_DEFAULTED_PARAMETER})*"
    else:
        arguments = f"(?:{_DEFAULTED_PARAMETER})*"
    return re.escape(function.original_name) + rf"\s*\(\s*(?P<args>{arguments})\s*\)\s*"


def function_pattern(
    function: Function,
    typedefs: TypedefRegistry,
    complete_signature: bool = True,
    settings: MatchingSettings = DEFAULT_SETTINGS,
) -> re.Pattern[str]:
    """Build the pattern for a member function block.

    A block opens on an empty line with the return type, the scope and the
    signature, followed by the description paragraph captured as ``docs``.

    Args:
        function: Function to describe.
        typedefs: Registry of typedef aliases.
        complete_signature: Whether pointer and reference decorations are required.
        settings: Block terminator settings.

    Returns:
        Compiled pattern with ``docs`` and ``args`` groups.
    """
    scope = re.escape(function.namespace.name) if function.namespace is not None else ""
    low, high = settings.function_trailing_blank_lines
    block_end = settings.function_block_blank_lines
    pattern = (
        r"(?:^|(?: --)|\n)\n"
        r"(?:[\w :*&<>,]+)?"
        rf"(?:(?:{scope}(?:\s*&)?::)| )"
        + signature_pattern(function, typedefs, complete_signature)
        + r"(?:const)?(?: \[[\w\s]+\])?\n"
        r"(?P<docs>\w.*?)"
        rf"(?:\n\s*){{{low},{high}}}"
        rf"(?:(?:&?\S* --)|(?:(?:\n\s*){{{block_end}}}))"
    )
    return re.compile(pattern, re.DOTALL)


def property_pattern(name: str, type_name: str, typedefs: TypedefRegistry) -> re.Pattern[str]:
    """Build the pattern for an entry of the ``Property Documentation`` section.

    Args:
        name: Property name as declared by ``Q_PROPERTY``.
        type_name: Printed property type.
        typedefs: Registry of typedef aliases.

    Returns:
        Compiled pattern with a ``docs`` group.
    """
    pattern = (
        r"Property Documentation.*(?<!\w)"
        + re.escape(name)
        + " : "
        + type_pattern(type_name, typedefs)
        + r"(?:\s+const)?\n(?P<docs>.*?)\nAccess functions:"
    )
    return re.compile(pattern, re.DOTALL)


def qualified_name(scope: str, name: str) -> str:
    """Prefix a name with its scope.

    Args:
        scope: Name of the enclosing scope, empty for the global scope.
        name: Unqualified name.

    Returns:
        ``scope::name``, or the bare name without a scope.
    """
    return f"{scope}::{name}" if scope else name


def enum_pattern(name: str, scope: str, settings: MatchingSettings = DEFAULT_SETTINGS) -> re.Pattern[str]:
    """Build the pattern for an enum block.

    Args:
        name: Enum name.
        scope: Name of the enclosing scope, empty for global enums.
        settings: Block terminator settings.

    Returns:
        Compiled pattern with a ``docs`` group.
    """
    flags = rf"(?:{re.escape(scope)}::)?\w+" if scope else r"\w+"
    pattern = (
        rf"enum {re.escape(qualified_name(scope, name))}\b"
        rf"(?:\s*flags {flags}\s+)?"
        rf"(?P<docs>.*?)\n{{{settings.enum_block_blank_lines}}}"
    )
    return re.compile(pattern, re.DOTALL)


def clean_enum_docs(docs: str) -> str:
    """Drop the QFlags boilerplate and the value table from an enum description.

    Args:
        docs: Captured enum block text.

    Returns:
        Description without boilerplate.
    """
    docs = QFLAGS_BOILERPLATE.sub("", docs)
    return VALUE_TABLE.sub("", docs).strip()


def enum_item_pattern(enum_name: str, item_name: str, scope: str, separator: str) -> re.Pattern[str]:
    """Build the pattern for an enumerator row of an enum value table.

    Rows read ``<name> <value> <description>``. Members of scoped enums
    are listed with the scope, members of global enums may be. The search
    stays inside the enum block and only looks at rows of its
    ``ConstantValue`` table, which runs up to the next empty line.

    Args:
        enum_name: Enum name.
        item_name: Enumerator name.
        scope: Name of the enclosing scope, empty for global enums.
        separator: Column separator pattern.

    Returns:
        Compiled pattern with a ``docs`` group.
    """
    if scope:
        member = re.escape(qualified_name(scope, item_name))
    else:
        member = r"(?:\w+::)?" + re.escape(item_name)
    pattern = (
        rf"enum {re.escape(qualified_name(scope, enum_name))}\b"
        r"(?:(?!\n{3}).)*?"
        r"ConstantValue(?:Description)?[^\n]*\n"
        r"(?:[^\n]+\n)*?"
        rf"{member}{separator}[^\t\n]+?{separator}"
        r"(?P<docs>[^\n]*?)(?:&\w+;)?\n"
    )
    return re.compile(pattern, re.DOTALL)


def class_pattern(name: str, settings: MatchingSettings = DEFAULT_SETTINGS) -> re.Pattern[str]:
    """Build the pattern for the overview of a class page.

    Args:
        name: Class name.
        settings: Block terminator settings.

    Returns:
        Compiled pattern with ``brief`` and ``detailed`` groups.
    """
    pattern = (
        rf"(?P<brief>(?:(?:The {re.escape(name)})|(?:This class)).+?)More\.\.\..*?\n"
        rf"Detailed Description\s+(?P<detailed>.*?)\n{{{settings.type_block_blank_lines},}}"
    )
    return re.compile(pattern, re.DOTALL)
