# write_notes/core/content.py

from __future__ import annotations

from typing import NamedTuple

TITLE_MARKER = "# "
UNTITLED = "Untitled"


class ParsedContent(NamedTuple):
    title: str
    body: str


def decode(text: str) -> ParsedContent:
    """
    Split a persisted note into (title, body).

    The first line starting with "# " is the title; every other line is body,
    in original order. Without such a line the whole text is the body.
    """
    lines = text.split("\n")
    for idx, line in enumerate(lines):
        if line.startswith(TITLE_MARKER):
            body = "\n".join(lines[:idx] + lines[idx + 1:])
            return ParsedContent(line[len(TITLE_MARKER):], body)
    return ParsedContent("", text)


def encode(title: str, body: str) -> str:
    """Title line, newline, body verbatim. An empty title still gets its marker line."""
    return f"{TITLE_MARKER}{title}\n{body}"


def parse_title(text: str) -> str:
    """Sidebar title of a raw note; "Untitled" when there is no title line."""
    for line in text.splitlines():
        if line.startswith(TITLE_MARKER):
            return line[len(TITLE_MARKER):]
    return UNTITLED
