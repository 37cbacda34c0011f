"""Constants that tie the matcher to the layout of the Qt documentation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchingSettings:
    """Page names and block terminators used while matching.

    The blank-line counts reflect how qdoc lays out generated pages; they
    are tuned against real pages rather than derived from a grammar.
    """

    global_page: str = "qtglobal.html"
    page_suffix: str = ".html"
    obsolete_suffix: str = "-obsolete.html"
    math_header: str = "qmath"
    math_pages: tuple[str, ...] = ("qtmath.html", "qtcore-qmath-h.html")
    algorithms_header: str = "qalgorithms"
    algorithms_pages: tuple[str, ...] = ("qtalgorithms.html",)
    property_markers: tuple[str, ...] = ("Q_PROPERTY", "QDOC_PROPERTY")
    # Newline groups closing a function description, then the empty lines before the next entry.
    function_trailing_blank_lines: tuple[int, int] = (1, 2)
    function_block_blank_lines: int = 2
    enum_block_blank_lines: int = 3
    type_block_blank_lines: int = 3


DEFAULT_SETTINGS = MatchingSettings()
