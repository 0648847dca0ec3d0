"""Document tree interface consumed by analyzers.

The full markdown parser is an external collaborator. Analyzers only need
to walk nodes depth-first and read ``type``/``lang``/``text``/``children``.
``parse_markdown`` is a small line-based adapter that recognises fences,
headings, paragraphs and inline code, which is enough for README-style
input when no richer tree is supplied.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence

_FENCE_PATTERN = re.compile(r"^(`{3,}|~{3,})\s*([\w+#.-]*)")
_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*)$")
_INLINE_CODE_PATTERN = re.compile(r"`([^`]+)`")


@dataclass
class DocumentNode:
    """A node of the parsed document tree."""

    type: str
    text: str = ""
    lang: Optional[str] = None
    children: List["DocumentNode"] = field(default_factory=list)
    line: Optional[int] = None


def walk(nodes: Iterable[DocumentNode]) -> Iterator[DocumentNode]:
    """Yield every node depth-first, parents before their children."""
    for node in nodes:
        yield node
        if node.children:
            yield from walk(node.children)


def normalize_document(document: Any) -> List[DocumentNode]:
    """Coerce the accepted document shapes into a list of nodes.

    Accepts a list of nodes, a single root node, a ``{"ast": [...]}`` wrapper,
    plain mappings with ``type``/``lang``/``text``/``children`` keys, or None.
    """
    if document is None:
        return []
    if isinstance(document, DocumentNode):
        if document.type in {"root", "document"}:
            return list(document.children)
        return [document]
    if isinstance(document, Mapping):
        if "ast" in document:
            return normalize_document(document["ast"])
        if "type" in document:
            return normalize_document(_node_from_mapping(document))
        raise TypeError("Document mapping must contain 'ast' or 'type'")
    if isinstance(document, Sequence) and not isinstance(document, (str, bytes)):
        nodes: List[DocumentNode] = []
        for item in document:
            nodes.extend(normalize_document(item))
        return nodes
    raise TypeError(f"Unsupported document type: {type(document).__name__}")


def _node_from_mapping(data: Mapping[str, Any]) -> DocumentNode:
    children = [
        _node_from_mapping(child)
        for child in data.get("children") or []
        if isinstance(child, Mapping)
    ]
    line = data.get("line")
    return DocumentNode(
        type=str(data.get("type")),
        text=str(data.get("text") or data.get("value") or ""),
        lang=data.get("lang") or None,
        children=children,
        line=line if isinstance(line, int) else None,
    )


def parse_markdown(content: str) -> List[DocumentNode]:
    """Build a shallow document tree from markdown text."""
    lines = content.split("\n")
    nodes: List[DocumentNode] = []
    paragraph: List[str] = []
    paragraph_start = 0
    index = 0

    def flush_paragraph() -> None:
        if not paragraph:
            return
        text = "\n".join(paragraph)
        spans = [
            DocumentNode(type="codespan", text=match.group(1), line=paragraph_start)
            for match in _INLINE_CODE_PATTERN.finditer(text)
        ]
        nodes.append(DocumentNode(type="paragraph", text=text, children=spans, line=paragraph_start))
        paragraph.clear()

    while index < len(lines):
        line = lines[index]
        stripped = line.strip()
        fence = _FENCE_PATTERN.match(stripped)
        if fence:
            flush_paragraph()
            marker = fence.group(1)
            body: List[str] = []
            start = index
            index += 1
            while index < len(lines) and not lines[index].strip().startswith(marker):
                body.append(lines[index])
                index += 1
            nodes.append(
                DocumentNode(
                    type="code",
                    text="\n".join(body),
                    lang=fence.group(2) or None,
                    line=start,
                )
            )
            index += 1
            continue
        heading = _HEADING_PATTERN.match(stripped)
        if heading:
            flush_paragraph()
            nodes.append(
                DocumentNode(
                    type="heading",
                    text=heading.group(2).strip(),
                    line=index,
                )
            )
        elif not stripped:
            flush_paragraph()
        else:
            if not paragraph:
                paragraph_start = index
            paragraph.append(line)
        index += 1

    flush_paragraph()
    return nodes


__all__ = ["DocumentNode", "normalize_document", "parse_markdown", "walk"]
