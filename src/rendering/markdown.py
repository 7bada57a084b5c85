from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Sequence, Union


# Render nodes
#
# The model answers in a small markdown subset: **bold**, "# " and "## "
# headings, "* " / "- " bullet lists, pipe tables and plain paragraphs.
# Everything else is shown as paragraph text.


@dataclass(frozen=True)
class Span:
    text: str
    bold: bool = False


Inline = List[Span]


@dataclass
class Heading:
    level: int          # 1 | 2
    spans: Inline


@dataclass
class Paragraph:
    spans: Inline


@dataclass
class BulletList:
    items: List[Inline] = field(default_factory=list)


@dataclass
class Table:
    headers: List[Inline] = field(default_factory=list)
    rows: List[List[Inline]] = field(default_factory=list)


Node = Union[Heading, Paragraph, BulletList, Table]


BLOCK_SEPARATOR = re.compile(r"\n\s*\n")
BOLD_SPAN = re.compile(r"(\*\*.*?\*\*)")
LIST_MARKER = re.compile(r"^[*-]\s")


def parse_inline(text: str) -> Inline:
    """
    Split text into plain and bold spans.

    A bold span runs from a "**" to the nearest following "**" on the same
    line; there is no nesting. Unpaired markers stay as literal text.
    """
    spans: Inline = []
    # re.split with a capture group puts the captured (bold) pieces at odd indexes
    for index, part in enumerate(BOLD_SPAN.split(text)):
        if not part:
            continue
        if index % 2 == 1:
            spans.append(Span(part[2:-2], bold=True))
        else:
            spans.append(Span(part))
    return spans


def plain_text(spans: Sequence[Span]) -> str:
    return "".join(span.text for span in spans)


def _split_cells(line: str) -> List[str]:
    return [cell.strip() for cell in line.split("|") if cell.strip()]


def _parse_table(block: str) -> Union[Table, None]:
    """Return a Table, or None if the block has no valid separator row."""
    lines = [line for line in block.split("\n") if line]
    if len(lines) < 2 or "---" not in lines[1]:
        return None

    headers = _split_cells(lines[0])
    if not headers:
        return None

    rows = [_split_cells(line) for line in lines[2:]]
    return Table(
        headers=[parse_inline(cell) for cell in headers],
        rows=[[parse_inline(cell) for cell in row] for row in rows],
    )


def _render_block(block: str) -> Node:
    if block.startswith("# "):
        return Heading(level=1, spans=parse_inline(block[2:]))
    if block.startswith("## "):
        return Heading(level=2, spans=parse_inline(block[3:]))

    if block.startswith("* ") or block.startswith("- "):
        items = [LIST_MARKER.sub("", line, count=1) for line in block.split("\n")]
        return BulletList(items=[parse_inline(item) for item in items])

    if "|" in block:
        table = _parse_table(block)
        if table is not None:
            return table

    return Paragraph(spans=parse_inline(block))


def render_markdown(text: str) -> List[Node]:
    """
    Convert model output into block-level render nodes.

    Blocks are separated by one or more blank lines and keep their order.
    Never raises: anything that does not look like a heading, list or
    well-formed table comes back as a paragraph.
    """
    if not text:
        return []

    nodes: List[Node] = []
    for raw_block in BLOCK_SEPARATOR.split(text):
        block = raw_block.strip()
        if not block:
            continue
        nodes.append(_render_block(block))
    return nodes
