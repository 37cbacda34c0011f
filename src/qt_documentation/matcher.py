"""Attaches Qt documentation to functions, properties, enums and classes."""

import html
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from qt_documentation.models import (
    Class,
    Comment,
    Enumeration,
    EnumerationItem,
    Function,
    ObsoleteMarker,
    Property,
    TranslationUnit,
    TypeDef,
    safe_identifier,
)
from qt_documentation.pages import obsolete_page_key, page_key
from qt_documentation.patterns import (
    ENUM_ITEM_SEPARATORS,
    class_pattern,
    clean_enum_docs,
    enum_item_pattern,
    enum_pattern,
    function_pattern,
    property_pattern,
)
from qt_documentation.settings import DEFAULT_SETTINGS, MatchingSettings
from qt_documentation.signature import BUILTIN_WORDS, SIGNEDNESS
from qt_documentation.store import load_documentation
from qt_documentation.typedefs import TypedefRegistry

logger = logging.getLogger(__name__)

ARGUMENT_NAME = re.compile(r"^(?P<prefix>.+?[\s*&]+)(?P<name>\w+)(\s*=\s*[^(,\s]+(\(\s*\))?)?\s*$", re.DOTALL)

# Filler for the left operand that qdoc omits from member operator signatures.
OPERATOR_ARGUMENT = "one"

OBSOLETE_HINTS = ("instead", "deprecated")

# Words that end an unnamed parameter type and must not be taken for a name.
TYPE_KEYWORDS = BUILTIN_WORDS | SIGNEDNESS | {"bool", "void"}

QT_TYPE_NAME = re.compile(r"Q[A-Z]")


@dataclass
class MatchResult:
    """Outcome of matching one function against one page."""

    success: bool = False
    brief_text: str = ""
    arguments: str | None = None


def split_arguments(arguments: str) -> list[str]:
    """Split a documented parameter list on commas outside template brackets.

    Args:
        arguments: Parameter list text without the enclosing parentheses.

    Returns:
        One fragment per parameter.
    """
    fragments = []
    depth = 0
    start = 0
    for index, char in enumerate(arguments):
        if char in "<(":
            depth += 1
        elif char in ">)":
            depth -= 1
        elif char == "," and depth == 0:
            fragments.append(arguments[start:index])
            start = index + 1
    fragments.append(arguments[start:])
    return fragments


def is_placeholder_name(name: str) -> bool:
    """Return whether a parameter name was generated for an anonymous parameter."""
    return name.startswith("_") and name[1:2].isdigit()


def is_type_word(prefix: str, name: str) -> bool:
    """Return whether the trailing word of a parameter fragment belongs to its type.

    Unnamed parameters end in their type, as in ``const QString`` or
    ``unsigned int``.

    Args:
        prefix: Fragment text before the trailing word.
        name: Trailing word of the fragment.

    Returns:
        True if the word cannot be a parameter name.
    """
    if name in TYPE_KEYWORDS or prefix.strip() == "const":
        return True
    return QT_TYPE_NAME.match(name) is not None


def fill_missing_parameter_names(function: Function, arguments: str) -> None:
    """Give anonymous parameters the names used in the documentation.

    Args:
        function: Function whose parameters are renamed in place.
        arguments: Parameter list captured from the documentation.
    """
    fragments = split_arguments(arguments)
    if len(fragments) == len(function.parameters) - 1:
        fragments.insert(0, OPERATOR_ARGUMENT)
    for parameter, fragment in zip(function.parameters, fragments):
        if not is_placeholder_name(parameter.name):
            continue
        match = ARGUMENT_NAME.match(fragment)
        if match and not is_type_word(match.group("prefix"), match.group("name")):
            parameter.name = safe_identifier(match.group("name"))


def obsolete_message(brief_text: str) -> str | None:
    """Find the line of a description that tells what to use instead.

    Args:
        brief_text: Matched documentation text.

    Returns:
        The first line mentioning a replacement or deprecation, if any.
    """
    text = html.unescape(html.escape(brief_text))
    for line in text.splitlines():
        if any(hint in line for hint in OBSOLETE_HINTS):
            return line
    return None


def mark_obsolete(function: Function) -> None:
    """Attach an obsolete marker carrying the replacement hint of the comment.

    Args:
        function: Documented function.
    """
    brief_text = function.comment.brief_text if function.comment else ""
    function.attributes = [attribute for attribute in function.attributes if attribute.kind != "Obsolete"]
    function.attributes.append(ObsoleteMarker(message=obsolete_message(brief_text)))


class DocumentationMatcher:
    """Finds the documentation of declarations in a Qt documentation store.

    The store and the typedef registry are read-only once the matcher is
    built; each ``document_*`` call only changes the declaration it is given
    and returns whether documentation was found.
    """

    def __init__(
        self,
        store: Mapping[str, str],
        typedefs: TypedefRegistry | None = None,
        settings: MatchingSettings = DEFAULT_SETTINGS,
    ) -> None:
        """Initialise matcher with its documentation sources.

        Args:
            store: Page file names mapped to stripped page text.
            typedefs: Registry of typedef aliases.
            settings: Page naming and block terminator settings.
        """
        self.store = store
        self.typedefs = typedefs if typedefs is not None else TypedefRegistry()
        self.settings = settings

    @classmethod
    def from_path(
        cls,
        docs_path: Path,
        module: str,
        typedefs: Iterable[TypeDef] = (),
        settings: MatchingSettings = DEFAULT_SETTINGS,
    ) -> "DocumentationMatcher":
        """Create a matcher for the documentation of a Qt module on disk.

        Args:
            docs_path: Documentation root directory.
            module: Qt module name, e.g. ``Core``.
            typedefs: Typedefs of the declaration model.
            settings: Page naming and block terminator settings.

        Returns:
            DocumentationMatcher instance.
        """
        return cls(load_documentation(docs_path, module), TypedefRegistry.from_typedefs(typedefs), settings)

    def _special_pages(self, function: Function) -> tuple[str, ...]:
        """Return the global pages of the header a function is declared in.

        Args:
            function: Function to look up.

        Returns:
            Page file names to try after the primary page, possibly empty.
        """
        unit = function.namespace
        if not isinstance(unit, TranslationUnit):
            return ()
        if self.settings.math_header in unit.file_name:
            return self.settings.math_pages
        if self.settings.algorithms_header in unit.file_name:
            return self.settings.algorithms_pages
        return ()

    def document_function(self, function: Function) -> bool:
        """Attach documentation to a function.

        The page of the function's scope is searched first, then the pages
        of the global math and algorithm headers, and last the obsolete
        members page with relaxed decorations, which also marks the
        function obsolete.

        Args:
            function: Function to document.

        Returns:
            True if documentation was found.
        """
        key = page_key(function.namespace, self.settings)
        if self._try_match(function, key):
            return True
        for special_key in self._special_pages(function):
            if self._try_match(function, special_key):
                return True
        return self._try_match(
            function, obsolete_page_key(key, self.settings), mark_as_obsolete=True, complete_signature=False
        )

    def match_function(self, function: Function, docs: str, complete_signature: bool = True) -> MatchResult:
        """Match a function against the text of one page.

        Args:
            function: Function to look for.
            docs: Stripped page text.
            complete_signature: Whether pointer and reference decorations are required.

        Returns:
            MatchResult instance.
        """
        match = function_pattern(function, self.typedefs, complete_signature, self.settings).search(docs)
        if match is None:
            return MatchResult()
        return MatchResult(success=True, brief_text=match.group("docs"), arguments=match.group("args"))

    def _try_match(
        self, function: Function, key: str, mark_as_obsolete: bool = False, complete_signature: bool = True
    ) -> bool:
        """Match a function against one page and apply the result.

        Args:
            function: Function to document.
            key: Page file name.
            mark_as_obsolete: Whether a match marks the function obsolete.
            complete_signature: Whether pointer and reference decorations are required.

        Returns:
            True if the page documents the function.
        """
        docs = self.store.get(key)
        if docs is None:
            return False
        result = self.match_function(function, docs, complete_signature)
        if not result.success:
            return False

        function.comment = Comment(brief_text=result.brief_text)
        fill_missing_parameter_names(function, result.arguments or "")
        if mark_as_obsolete:
            mark_obsolete(function)
        logger.debug("Documented function %s from %s", function.original_name, key)
        return True

    def declared_property_name(self, prop: Property) -> str | None:
        """Return the name under which a ``Q_PROPERTY`` macro declares a property.

        Boolean properties are often declared as ``isName``; one-letter
        names are never given that form.

        Args:
            prop: Property to look up.

        Returns:
            The declared name, or None for accessor-only properties.
        """
        if prop.namespace is None:
            return None
        alternative = prop.name if len(prop.name) == 1 else "is" + prop.name[:1].upper() + prop.name[1:]
        for text in prop.namespace.macro_expansions:
            if not any(marker in text for marker in self.settings.property_markers):
                continue
            tokens = text.split()
            if len(tokens) > 1 and tokens[1] in (prop.name, alternative):
                return tokens[1]
        return None

    def document_property(self, prop: Property) -> bool:
        """Attach documentation to a property.

        Properties declared with ``Q_PROPERTY`` are documented from the
        ``Property Documentation`` section. Other properties without a
        backing field borrow the descriptions of their getter and setter.

        Args:
            prop: Property to document.

        Returns:
            True if documentation was attached.
        """
        declared_name = self.declared_property_name(prop)
        if declared_name is not None:
            prop.name = declared_name
            return self._document_declared_property(prop)
        if prop.backing_field is not None:
            return False

        brief_text = ""
        for accessor in (prop.get_method, prop.set_method):
            if accessor is None:
                continue
            if accessor.comment is None:
                self.document_function(accessor)
            if accessor.comment is not None and accessor.comment.brief_text:
                brief_text = f"{brief_text}\n{accessor.comment.brief_text}" if brief_text else accessor.comment.brief_text
        if not brief_text:
            return False
        prop.comment = Comment(brief_text=brief_text)
        return True

    def _document_declared_property(self, prop: Property) -> bool:
        """Document a property from the Property Documentation section of its class page.

        Args:
            prop: Property carrying its declared name.

        Returns:
            True if documentation was found.
        """
        key = page_key(prop.namespace, self.settings)
        docs = self.store.get(key)
        if docs is None:
            return False
        match = property_pattern(prop.name, prop.type, self.typedefs).search(docs)
        if match is None:
            return False
        prop.comment = Comment(brief_text=match.group("docs"))
        logger.debug("Documented property %s from %s", prop.name, key)
        return True

    def document_type(self, type_: Class) -> bool:
        """Attach the class overview to a class.

        Args:
            type_: Class to document.

        Returns:
            True if documentation was found.
        """
        key = page_key(type_, self.settings)
        docs = self.store.get(key)
        if docs is None:
            return False
        match = class_pattern(type_.name, self.settings).search(docs)
        if match is None:
            return False
        brief_text = match.group("brief").strip()
        type_.comment = Comment(brief_text=brief_text, text=match.group("detailed").replace(brief_text, ""))
        logger.debug("Documented class %s from %s", type_.name, key)
        return True

    def document_enum(self, enum: Enumeration) -> bool:
        """Attach documentation to an enum and each of its items.

        Args:
            enum: Enum to document.

        Returns:
            True if the enum itself was documented.
        """
        documented = False
        key = page_key(enum.namespace, self.settings)
        docs = self.store.get(key)
        if docs is not None:
            scope = enum.namespace.name if enum.namespace is not None else ""
            match = enum_pattern(enum.name, scope, self.settings).search(docs)
            if match is not None:
                text = match.group("docs").strip()
                if text:
                    enum.comment = Comment(brief_text=clean_enum_docs(text))
                    documented = True
                    logger.debug("Documented enum %s from %s", enum.name, key)
        for item in enum.items:
            self.document_enum_item(enum, item)
        return documented

    def document_enum_item(self, enum: Enumeration, item: EnumerationItem) -> bool:
        """Attach the description column of an enum value table to an item.

        Args:
            enum: Enum owning the item.
            item: Item to document.

        Returns:
            True if documentation was found.
        """
        docs = self.store.get(page_key(enum.namespace, self.settings))
        if docs is None:
            return False
        scope = enum.namespace.name if enum.namespace is not None else ""
        for separator in ENUM_ITEM_SEPARATORS:
            match = enum_item_pattern(enum.name, item.name, scope, separator).search(docs)
            if match is None:
                continue
            text = match.group("docs").strip()
            if text:
                item.comment = Comment(brief_text=text)
                return True
        return False
