"""
Append targets for rendered markup.
"""
from typing import Any, List

from bs4 import BeautifulSoup, Tag


class BufferTarget:
    """In-memory append target collecting rendered fragments."""

    def __init__(self):
        self.fragments: List[str] = []

    def append(self, html: str) -> None:
        self.fragments.append(html)

    def getvalue(self) -> str:
        return "".join(self.fragments)

    def __str__(self) -> str:
        return self.getvalue()


def append_html(target: Any, html: str) -> None:
    """
    Append rendered markup to a target.

    A BeautifulSoup Tag receives the parsed nodes of the fragment, like a
    DOM append. Other targets need an ``append`` or ``write`` method taking
    the string.
    """
    if isinstance(target, Tag):
        fragment = BeautifulSoup(html, "html.parser")
        for node in list(fragment.contents):
            target.append(node.extract())
        return

    if hasattr(target, "append"):
        target.append(html)
    elif hasattr(target, "write"):
        target.write(html)
    else:
        raise TypeError(f"Cannot append rendered markup to {type(target).__name__}")
