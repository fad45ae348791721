"""Shared test fixtures and helpers."""

from __future__ import annotations

from datetime import datetime

import pytest

from writ.ast import Value
from writ.document import Document, new_document
from writ.expand import expand
from writ.lexer import tokenize
from writ.parser import parse
from writ.strings import strip_ascii
from writ.tokens import Token, TokenType

# Fixed clock so /date and /time are predictable
NOW = datetime(2024, 3, 7, 9, 5, 4)


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns the top-level values."""

    def _parse(source: str, filename: str = "test.write") -> list[Value]:
        return parse(source, filename)

    return _parse


@pytest.fixture
def new_doc():
    """Return a helper that builds a Document with the fixed test clock."""

    def _new(filename: str = "test.write", source: str = "") -> Document:
        return new_document(filename, source, now=NOW)

    return _new


@pytest.fixture
def run(new_doc):
    """Return a helper that expands source and returns the trimmed output."""

    def _run(source: str, filename: str = "test.write", doc: Document | None = None) -> str:
        if doc is None:
            doc = new_doc(filename, source)
        return strip_ascii(expand(parse(source, filename), doc))

    return _run


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def find_tokens(tokens: list[Token], tt: TokenType) -> list[Token]:
    """Return all tokens of the given type."""
    return [t for t in tokens if t.type == tt]
