from __future__ import annotations

from html import escape
from typing import List, Sequence

from src.rendering.markdown import (
    BulletList,
    Heading,
    Node,
    Paragraph,
    Span,
    Table,
    render_markdown,
)


# HTML output for st.markdown(..., unsafe_allow_html=True).
# All model text is escaped; only the tags below are ever emitted.


def _inline_html(spans: Sequence[Span]) -> str:
    parts: List[str] = []
    for span in spans:
        text = escape(span.text).replace("\n", "<br>")
        parts.append(f"<strong>{text}</strong>" if span.bold else text)
    return "".join(parts)


def _node_html(node: Node) -> str:
    if isinstance(node, Heading):
        tag = f"h{node.level}"
        return f"<{tag} class='fm-h{node.level}'>{_inline_html(node.spans)}</{tag}>"

    if isinstance(node, BulletList):
        items = "".join(f"<li>{_inline_html(item)}</li>" for item in node.items)
        return f"<ul class='fm-list'>{items}</ul>"

    if isinstance(node, Table):
        head = "".join(f"<th>{_inline_html(cell)}</th>" for cell in node.headers)
        body = "".join(
            "<tr>" + "".join(f"<td>{_inline_html(cell)}</td>" for cell in row) + "</tr>"
            for row in node.rows
        )
        return (
            "<div class='fm-table-wrap'><table class='fm-table'>"
            f"<thead><tr>{head}</tr></thead><tbody>{body}</tbody>"
            "</table></div>"
        )

    if isinstance(node, Paragraph):
        return f"<p>{_inline_html(node.spans)}</p>"

    raise TypeError(f"Unknown render node: {type(node).__name__}")


def nodes_to_html(nodes: Sequence[Node]) -> str:
    return "\n".join(_node_html(node) for node in nodes)


def markdown_to_html(text: str) -> str:
    """Render model markdown straight to an HTML fragment."""
    return nodes_to_html(render_markdown(text))
