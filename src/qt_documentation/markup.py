"""Conversion of Qt documentation pages into plain text for matching."""

import html

# Text of the adjacent tags closing one table cell and opening the next.
CELL_BOUNDARY = "/tdtd"


def strip_tags(source: str) -> str:
    """Remove markup from a documentation page.

    Everything between ``<`` and ``>`` is dropped without looking at its
    structure. The text of adjacent tags is collected until the next plain
    character; when it holds a cell boundary (``</td><td>``) a tab is
    written first, so table rows keep their columns. Character entities
    are decoded once, after the markup is gone.

    Args:
        source: Raw page markup.

    Returns:
        Plain page text.
    """
    output: list[str] = []
    tag: list[str] = []
    inside = False

    for char in source:
        if char == "<":
            inside = True
            continue
        if char == ">":
            inside = False
            continue
        if inside:
            tag.append(char)
            continue
        if tag:
            if CELL_BOUNDARY in "".join(tag):
                output.append("\t")
            tag.clear()
        output.append(char)

    return html.unescape("".join(output))
