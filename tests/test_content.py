import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from write_notes.core.content import decode, encode, parse_title


def test_decode_extracts_title():
    result = decode("# Hello World\nBody text")
    assert result.title == "Hello World"
    assert result.body == "Body text"


def test_decode_keeps_lines_before_title():
    assert decode("Some intro\n# Title\nBody") == ("Title", "Some intro\nBody")


def test_decode_without_title_returns_text_unchanged():
    assert decode("No heading") == ("", "No heading")
    assert decode("\n\n  spaced  \n") == ("", "\n\n  spaced  \n")


def test_decode_consumes_only_first_title_line():
    assert decode("# A\n# B\nC") == ("A", "# B\nC")


def test_decode_ignores_deeper_headings():
    assert decode("## Sub\ntext") == ("", "## Sub\ntext")


def test_encode_always_writes_title_line():
    assert encode("My Title", "Body text") == "# My Title\nBody text"
    assert encode("", "x") == "# \nx"
    assert encode("T", "") == "# T\n"


def test_round_trip_keeps_blank_lines():
    body = "\n\nfirst\n\nlast\n\n"
    assert decode(encode("Title", body)) == ("Title", body)
    assert decode(encode("", "")) == ("", "")


def test_parse_title_defaults_to_untitled():
    assert parse_title("# Hello\nbody") == "Hello"
    assert parse_title("intro\n# Later") == "Later"
    assert parse_title("## Not a title") == "Untitled"
    assert parse_title("") == "Untitled"
