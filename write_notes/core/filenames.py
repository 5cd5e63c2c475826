# write_notes/core/filenames.py

from __future__ import annotations


NOTE_SUFFIX = ".md"
UNTITLED_SLUG = "untitled"


def slugify(text: str) -> str:
    """
    Lowercase, runs of non-alphanumerics collapsed into one dash,
    no leading or trailing dashes.

    Unicode letters and digits are kept as they are.
    """
    out: list[str] = []
    prev_dash = False
    for ch in str(text).lower():
        if ch.isalnum():
            out.append(ch)
            prev_dash = False
        else:
            if not prev_dash and out:
                out.append("-")
            prev_dash = True
    return "".join(out).rstrip("-")


def title_slug(title: str) -> str:
    if not title or title == "Untitled":
        return UNTITLED_SLUG
    return slugify(title) or UNTITLED_SLUG


def parse_file_number(name: str) -> int | None:
    """Ordinal prefix of "<number>-<slug>[.md]", or None."""
    head, sep, _ = name.partition("-")
    if not sep or not (head.isascii() and head.isdigit()):
        return None
    return int(head)


def split_note_name(name: str) -> tuple[int | None, str]:
    """("12-hello.md") -> (12, "hello")"""
    stem = name[: -len(NOTE_SUFFIX)] if name.endswith(NOTE_SUFFIX) else name
    number = parse_file_number(stem)
    if number is None:
        return None, stem
    return number, stem.partition("-")[2] or UNTITLED_SLUG


def note_file_name(number: int, slug: str) -> str:
    return f"{number}-{slug}{NOTE_SUFFIX}"
