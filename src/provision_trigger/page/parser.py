"""Build a :class:`Document` from HTML markup."""

from __future__ import annotations

from html.parser import HTMLParser
from pathlib import Path

from provision_trigger.page.dom import Document, Element

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.document = Document()
        self._stack: list[Element] = [self.document.root]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = Element(tag, {k: v if v is not None else "" for k, v in attrs})
        self._stack[-1].append(element)
        if element.tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(
        self, tag: str, attrs: list[tuple[str, str | None]]
    ) -> None:
        element = Element(tag, {k: v if v is not None else "" for k, v in attrs})
        self._stack[-1].append(element)

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        # Close up to the nearest open element with this tag; stray end tags
        # are ignored.
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return

    def handle_data(self, data: str) -> None:
        self._stack[-1].text += data


def parse_html(text: str) -> Document:
    """Parse *text* into a Document. Unclosed elements close at end of input."""
    builder = _TreeBuilder()
    builder.feed(text)
    builder.close()
    return builder.document


def load_page(path: str | Path) -> Document:
    """Read and parse an HTML file."""
    p = Path(path)
    if not p.exists():
        msg = f"Page not found: {p}"
        raise FileNotFoundError(msg)
    return parse_html(p.read_text(encoding="utf-8"))
