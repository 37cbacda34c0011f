"""Tests for type parsing and type pattern rendering."""

import pytest

from qt_documentation.models import TypeDef
from qt_documentation.signature import compile_type_pattern, parse_type
from qt_documentation.typedefs import TypedefRegistry


@pytest.fixture
def typedefs() -> TypedefRegistry:
    """Create a registry with Qt typedefs.

    Returns:
        TypedefRegistry instance.
    """
    return TypedefRegistry.from_typedefs(
        [
            TypeDef("qreal", "double"),
            TypeDef("QObjectList", "QList<QObject*>"),
            TypeDef("QVariantMap", "QMap<QString, QVariant>"),
        ]
    )


def matches(type_name: str, text: str, typedefs: TypedefRegistry | None = None, complete: bool = True) -> bool:
    """Check whether the pattern of a type matches a documentation spelling.

    Args:
        type_name: Printed C++ type.
        text: Documentation spelling.
        typedefs: Optional registry of typedef aliases.
        complete: Whether decorations are required.

    Returns:
        True if the whole spelling matches.
    """
    pattern = compile_type_pattern(type_name, typedefs or TypedefRegistry(), complete)
    return pattern.fullmatch(text) is not None


def test_parse_decorated_template() -> None:
    """Test parsing a const reference to a template."""
    spec = parse_type("const QList<QObject*>&")

    assert spec.const
    assert spec.reference
    assert spec.pointers == 0
    assert spec.base.name == "QList"
    assert spec.base.arguments is not None
    assert spec.base.arguments[0].base.name == "QObject"
    assert spec.base.arguments[0].pointers == 1
    assert spec.spelling == "QList<QObject*>"


def test_parse_signedness_and_builtin_words() -> None:
    """Test parsing multi-word builtin types."""
    spec = parse_type("unsigned long long")

    assert spec.signedness == "unsigned"
    assert spec.base.name == "long long"
    assert spec.spelling == "unsigned long long"


def test_parse_qualified_name() -> None:
    """Test parsing a namespace-qualified enum type."""
    spec = parse_type("Qt::AlignmentFlag")

    assert [segment.name for segment in spec.segments] == ["Qt", "AlignmentFlag"]
    assert spec.qualifier[0].name == "Qt"


def test_parse_template_arguments_split_on_top_level_commas() -> None:
    """Test that nested template arguments are parsed separately."""
    spec = parse_type("QMap<QString, QPair<int, double>>")

    assert spec.base.arguments is not None
    assert [argument.base.name for argument in spec.base.arguments] == ["QString", "QPair"]
    assert spec.spelling == "QMap<QString,QPair<int,double>>"


def test_parse_function_pointer_is_opaque() -> None:
    """Test that types outside the grammar are kept as text."""
    spec = parse_type("void (*)(int)")

    assert spec.is_opaque
    assert spec.raw == "void (*)(int)"


def test_plain_type() -> None:
    """Test that a type matches itself and not an unrelated type."""
    assert matches("QString", "QString")
    assert not matches("QString", "QStringList")
    assert not matches("QString", "QByteArray")


def test_const_is_optional() -> None:
    """Test that const may be present or missing."""
    assert matches("const QString&", "const QString &")
    assert matches("const QString&", "QString&")


def test_reference_required_for_complete_signature() -> None:
    """Test that reference decorations are required in complete signatures."""
    assert not matches("const QString&", "QString")
    assert matches("const QString&", "QString", complete=False)


def test_pointer_spellings() -> None:
    """Test that pointers match with spaces and as arrays."""
    assert matches("QObject*", "QObject *")
    assert matches("QObject*", "QObject[]")
    assert matches("char**", "char **")
    assert not matches("QObject*", "QObject")


def test_qualifier_is_optional() -> None:
    """Test that namespace qualifiers may be left out."""
    assert matches("Qt::AlignmentFlag", "Qt::AlignmentFlag")
    assert matches("Qt::AlignmentFlag", "AlignmentFlag")


def test_qualifier_with_template_is_required() -> None:
    """Test that a templated qualifier stays in the pattern."""
    assert matches("QList<int>::iterator", "QList<int>::iterator")
    assert not matches("QList<int>::iterator", "iterator")


def test_template_whitespace(typedefs: TypedefRegistry) -> None:
    """Test that template spellings tolerate whitespace."""
    assert matches("QList<QObject*>", "QList<QObject *>", typedefs)
    assert matches("QList<QObject*>", "QList< QObject* >", typedefs)


def test_nested_templates() -> None:
    """Test a reference to a map holding a list of pointers."""
    assert matches("const QMap<QString, QList<QVariant*>>&", "QMap<QString, QList<QVariant *> > &")
    assert matches("const QMap<QString, QList<QVariant*>>&", "const QMap<QString,QList<QVariant[]>>&")
    assert not matches("const QMap<QString, QList<QVariant*>>&", "QMap<QString, QList<QVariant> > &")


def test_typedef_alias(typedefs: TypedefRegistry) -> None:
    """Test that registered aliases match."""
    assert matches("double", "qreal", typedefs)
    assert matches("const QList<QObject*>&", "const QObjectList &", typedefs)


def test_typedef_alias_in_template_argument(typedefs: TypedefRegistry) -> None:
    """Test that aliases of template arguments match."""
    assert matches("QList<QMap<QString, QVariant>>", "QList<QVariantMap>", typedefs)


@pytest.mark.parametrize(
    ("type_name", "synonym"),
    [
        ("int", "long"),
        ("int*", "long *"),
        ("unsigned int", "unsigned long"),
        ("char", "wchar_t"),
        ("const char*", "const wchar_t *"),
    ],
)
def test_legacy_synonyms(type_name: str, synonym: str) -> None:
    """Test the fixed legacy numeric and character synonyms."""
    assert matches(type_name, type_name)
    assert matches(type_name, synonym)


def test_no_synonym_for_references() -> None:
    """Test that synonyms only cover the listed spellings."""
    assert not matches("const int&", "const long &")


def test_opaque_type_matches_itself() -> None:
    """Test that opaque types still match their own spelling."""
    assert matches("void (*)(int)", "void (*)(int)")
    assert matches("void (*)(int)", "void(*)(int)")
