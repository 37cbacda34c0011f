"""Normalisation of printed C++ types into patterns that match documentation spellings.

A printed type is first parsed into a small syntax tree (:class:`TypeSpec`)
and the tree is then rendered as a regular expression. The rendered
pattern tolerates the ways Qt documentation spells the same type
differently from the declaration model: optional ``const`` and
signedness, optional namespace qualifiers, free whitespace, ``[]`` for
``*``, typedef aliases and the legacy ``long``/``wchar_t`` synonyms.
"""

import re
from dataclasses import dataclass, field

from qt_documentation.typedefs import TypedefRegistry, canonical_type_name

# Words that combine into a single builtin type name, e.g. "long long".
BUILTIN_WORDS = frozenset({"char", "double", "float", "int", "long", "short"})

SIGNEDNESS = frozenset({"signed", "unsigned"})

# The declaration model maps C++ long to int and wchar_t to char, so the
# documentation may still use the original spelling.
LEGACY_SYNONYMS = {
    "int": "long",
    "int*": "long",
    "unsigned int": "unsigned long",
    "unsigned int*": "unsigned long",
    "char": "wchar_t",
    "char*": "wchar_t",
    "const char*": "wchar_t",
}

_TOKEN = re.compile(r"\s*(?:(?P<word>\w+)|(?P<scope>::)|(?P<array>\[\s*\])|(?P<punct>[<>,*&]))")

_ANY_QUALIFIER = r"(?:\w+::)?"
_REFERENCE = r" *& *"
_POINTER = r" *(?:\*|\[\])+ *"
_ANY_DECORATION = r"(?: *(?:&|(?:\*|\[\])+) *)?"

# Aliases and synonyms are rendered without alias expansion of their own arguments.
_NO_TYPEDEFS = TypedefRegistry()


class TypeSyntaxError(ValueError):
    """Raised when a printed type is outside the supported grammar."""


@dataclass
class NameSegment:
    """One ``::``-separated part of a type name, with its template arguments."""

    name: str
    arguments: list["TypeSpec"] | None = None


@dataclass
class TypeSpec:
    """Parsed form of a printed C++ type.

    ``spelling`` is the undecorated name as printed, including signedness
    and template arguments; it is the key for typedef lookups. A type the
    grammar cannot express keeps its text in ``raw`` and has no segments.
    """

    segments: list[NameSegment] = field(default_factory=list)
    const: bool = False
    signedness: str | None = None
    reference: bool = False
    pointers: int = 0
    spelling: str = ""
    raw: str | None = None

    @property
    def is_opaque(self) -> bool:
        """Whether the type was kept as text instead of parsed."""
        return self.raw is not None

    @property
    def qualifier(self) -> list[NameSegment]:
        """Segments before the base name, e.g. ``Qt`` in ``Qt::AlignmentFlag``."""
        return self.segments[:-1]

    @property
    def base(self) -> NameSegment:
        """Last segment, the name the type is known by."""
        return self.segments[-1]


class _Token:
    """One lexical token with its position in the printed type."""

    __slots__ = ("kind", "text", "start", "end")

    def __init__(self, kind: str, text: str, start: int, end: int) -> None:
        """Initialise token.

        Args:
            kind: Token group name: word, scope, array or punct.
            text: Token text.
            start: Offset of the first character.
            end: Offset after the last character.
        """
        self.kind = kind
        self.text = text
        self.start = start
        self.end = end


def _tokenise(text: str) -> list[_Token]:
    """Split a printed type into tokens.

    Args:
        text: Printed C++ type.

    Returns:
        Tokens in source order.

    Raises:
        TypeSyntaxError: If a character starts no token.
    """
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN.match(text, position)
        if match is None:
            if text[position:].strip():
                msg = f"Unexpected character {text[position]!r} in type {text!r}"
                raise TypeSyntaxError(msg)
            break
        kind = match.lastgroup or ""
        tokens.append(_Token(kind, match.group(kind), match.start(kind), match.end(kind)))
        position = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the tokens of one printed type."""

    def __init__(self, text: str) -> None:
        """Initialise parser over a printed type.

        Args:
            text: Printed C++ type.
        """
        self.text = text
        self.tokens = _tokenise(text)
        self.position = 0

    def _peek(self) -> _Token | None:
        """Return the next token without consuming it."""
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def _accept(self, text: str) -> _Token | None:
        """Consume the next token if it has the given text.

        Args:
            text: Expected token text.

        Returns:
            The consumed token, or None if the next token differs.
        """
        token = self._peek()
        if token is not None and token.text == text:
            self.position += 1
            return token
        return None

    def _expect_word(self) -> _Token:
        """Consume the next token, which must be a word.

        Returns:
            The word token.

        Raises:
            TypeSyntaxError: If the next token is not a word.
        """
        token = self._peek()
        if token is None or token.kind != "word":
            msg = f"Expected a name in type {self.text!r}"
            raise TypeSyntaxError(msg)
        self.position += 1
        return token

    def parse(self) -> TypeSpec:
        """Parse the whole printed type.

        Returns:
            TypeSpec instance.

        Raises:
            TypeSyntaxError: If tokens remain after the type.
        """
        spec = self._type()
        token = self._peek()
        if token is not None:
            msg = f"Unexpected {token.text!r} in type {self.text!r}"
            raise TypeSyntaxError(msg)
        return spec

    def _type(self) -> TypeSpec:
        """Parse a type: const, signedness, scoped name and decorations.

        Returns:
            TypeSpec instance.

        Raises:
            TypeSyntaxError: If the type has no name.
        """
        spec = TypeSpec()
        spec.const = self._accept("const") is not None

        first = self._peek()
        if first is None:
            msg = f"Missing type name in {self.text!r}"
            raise TypeSyntaxError(msg)
        if first.text in SIGNEDNESS:
            self.position += 1
            following = self._peek()
            if following is not None and following.kind == "word" and following.text != "const":
                spec.signedness = first.text
            else:
                # A lone "unsigned" names a type of its own.
                self.position -= 1

        spec.segments.append(self._segment())
        while self._accept("::"):
            spec.segments.append(self._segment())
        spec.spelling = canonical_type_name(self.text[first.start : self.tokens[self.position - 1].end])

        if self._accept("const"):
            spec.const = True
        while True:
            token = self._peek()
            if token is None:
                break
            if token.text == "*" or token.kind == "array":
                spec.pointers += 1
            elif token.text == "&":
                spec.reference = True
            elif token.text != "const":
                break
            self.position += 1
        return spec

    def _segment(self) -> NameSegment:
        """Parse one name segment with its optional template arguments.

        Returns:
            NameSegment instance.

        Raises:
            TypeSyntaxError: If template arguments are not closed.
        """
        words = [self._expect_word().text]
        if words[0] in BUILTIN_WORDS:
            while (token := self._peek()) is not None and token.text in BUILTIN_WORDS:
                words.append(token.text)
                self.position += 1
        segment = NameSegment(" ".join(words))
        if self._accept("<"):
            segment.arguments = [self._type()]
            while self._accept(","):
                segment.arguments.append(self._type())
            if not self._accept(">"):
                msg = f"Unterminated template arguments in type {self.text!r}"
                raise TypeSyntaxError(msg)
        return segment


def parse_type(type_name: str) -> TypeSpec:
    """Parse a printed C++ type.

    Types outside the grammar (function pointers, sized arrays and the
    like) come back opaque instead of raising.

    Args:
        type_name: Printed C++ type, e.g. ``const QList<QObject*>&``.

    Returns:
        TypeSpec instance.
    """
    try:
        return _Parser(type_name).parse()
    except TypeSyntaxError:
        text = type_name.strip()
        const = text.startswith("const ")
        if const:
            text = text[len("const ") :].lstrip()
        return TypeSpec(const=const, spelling=canonical_type_name(text), raw=text)


def _render_words(name: str) -> str:
    """Render a possibly multi-word name with free whitespace between words."""
    return r"\s+".join(re.escape(word) for word in name.split())


def _render_segment(segment: NameSegment, typedefs: TypedefRegistry) -> str:
    """Render one name segment and its template arguments.

    Args:
        segment: Segment to render.
        typedefs: Registry used for template arguments.

    Returns:
        Pattern text.
    """
    pattern = _render_words(segment.name)
    if segment.arguments is not None:
        arguments = r",\s*".join(render(argument, typedefs) for argument in segment.arguments)
        pattern += rf"\s*<\s*{arguments}\s*>"
    return pattern


def _render_opaque(raw: str) -> str:
    """Render unparsed type text, loosening whitespace and decorations.

    Args:
        raw: Type text outside the grammar.

    Returns:
        Pattern text.
    """
    parts = []
    for char in raw:
        if char == "*":
            parts.append(r"\s*(?:\*|\[\])")
        elif char == "&":
            parts.append(r"\s*&")
        elif char == ",":
            parts.append(r",\s*")
        elif char.isspace():
            parts.append(r"\s*")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


def render_name(spec: TypeSpec, typedefs: TypedefRegistry) -> str:
    """Render the undecorated name of a type.

    Args:
        spec: Parsed type.
        typedefs: Registry used for template arguments.

    Returns:
        Pattern text for the bare name.
    """
    if spec.raw is not None:
        return _ANY_QUALIFIER + _render_opaque(spec.raw)

    pattern = _ANY_QUALIFIER
    if spec.signedness:
        pattern += rf"(?:{spec.signedness}\s+)?"
    if spec.qualifier:
        qualifier = "".join(_render_segment(segment, typedefs) + "::" for segment in spec.qualifier)
        if any(segment.arguments is not None for segment in spec.qualifier):
            pattern += qualifier
        else:
            pattern += f"(?:{qualifier})?"
    return pattern + _render_segment(spec.base, typedefs)


def _legacy_key(spec: TypeSpec) -> str:
    """Return the spelling under which a type is listed in ``LEGACY_SYNONYMS``."""
    key = ("const " if spec.const else "") + spec.spelling + "*" * spec.pointers
    return key + "&" if spec.reference else key


def render(spec: TypeSpec, typedefs: TypedefRegistry, complete_signature: bool = True) -> str:
    """Render a parsed type as a documentation search pattern.

    Args:
        spec: Parsed type.
        typedefs: Registry of typedef aliases.
        complete_signature: Require the pointer or reference decoration when
            True; accept any or none when False.

    Returns:
        Pattern text.
    """
    alternatives = [render_name(spec, typedefs)]
    for alias in typedefs.aliases_for(spec.spelling):
        alternatives.append(render_name(parse_type(alias), _NO_TYPEDEFS))
    synonym = LEGACY_SYNONYMS.get(_legacy_key(spec))
    if synonym is not None:
        alternatives.append(render_name(parse_type(synonym), _NO_TYPEDEFS))

    pattern = r"(?:const\s+)?(?:" + "|".join(f"(?:{alternative})" for alternative in alternatives) + ")"
    if spec.is_opaque:
        return pattern
    if not complete_signature:
        return pattern + _ANY_DECORATION
    if spec.reference:
        return pattern + _REFERENCE
    if spec.pointers:
        return pattern + _POINTER
    return pattern


def type_pattern(type_name: str, typedefs: TypedefRegistry, complete_signature: bool = True) -> str:
    """Build the search pattern for a printed C++ type.

    Args:
        type_name: Printed C++ type.
        typedefs: Registry of typedef aliases.
        complete_signature: Whether pointer and reference decorations are required.

    Returns:
        Pattern text matching the documentation spellings of the type.
    """
    return render(parse_type(type_name), typedefs, complete_signature)


def compile_type_pattern(
    type_name: str, typedefs: TypedefRegistry, complete_signature: bool = True
) -> re.Pattern[str]:
    """Compile :func:`type_pattern` for matching a whole type spelling.

    Args:
        type_name: Printed C++ type.
        typedefs: Registry of typedef aliases.
        complete_signature: Whether pointer and reference decorations are required.

    Returns:
        Compiled pattern; use ``fullmatch`` against a spelling.
    """
    return re.compile(type_pattern(type_name, typedefs, complete_signature))
