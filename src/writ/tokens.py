"""Token types, data structures, and rune classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Directives
    LET = auto()  # #let
    SET = auto()  # #set
    USE = auto()  # #use
    DEF = auto()  # #def
    END = auto()  # #end
    VARIABLE = auto()  # #name, variable reference

    # Content
    IDENTIFIER = auto()  # ident_char+ (letters, digits, -_!'"/.)
    ARGUMENT = auto()  # $name, macro parameter
    TEXT = auto()
    NUMBER = auto()
    ESCAPE = auto()  # value is resolved character
    COMMENT = auto()  # #! rest of line

    # Structural (single-character)
    HASH = auto()  # # with no name after it
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    FSLASH = auto()  # /
    PIPE = auto()  # |

    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with resolved value and original source text."""

    type: TokenType
    value: str
    raw: str
    span: Span
    number: float = 0.0

    def describe(self) -> str:
        """Short human-readable form used in parse errors."""
        if self.type == TokenType.EOF:
            return "EOF"
        if self.type in _KEYWORD_NAMES:
            return f"'#{_KEYWORD_NAMES[self.type]}'"
        if self.type in (TokenType.TEXT, TokenType.NUMBER):
            return f"{self.type.name.lower()} {self.raw.strip()!r}"
        if self.type == TokenType.VARIABLE:
            return f"variable '#{self.value}'"
        if self.type == TokenType.ARGUMENT:
            return f"argument '${self.value}'"
        if self.type == TokenType.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.type == TokenType.COMMENT:
            return "comment"
        return f"'{self.raw}'"


_KEYWORD_NAMES: dict[TokenType, str] = {
    TokenType.LET: "let",
    TokenType.SET: "set",
    TokenType.USE: "use",
    TokenType.DEF: "def",
    TokenType.END: "end",
}

KEYWORDS: dict[str, TokenType] = {name: tt for tt, name in _KEYWORD_NAMES.items()}

# Identifier special characters: - _ ! ' " / .
_IDENT_SPECIAL = frozenset("-_!'\"/.")

# Runes that end a text run
_TEXT_SPECIAL = frozenset("()#|\\\n\r\t")


def is_ident_char(ch: str) -> bool:
    """Return True if ch is a valid identifier character."""
    return ch.isalpha() or ch.isdigit() or ch in _IDENT_SPECIAL


def is_text_char(ch: str) -> bool:
    """Return True if ch may appear in a plain text run."""
    return ch not in _TEXT_SPECIAL


def is_digit(ch: str) -> bool:
    return ch in "0123456789"


def is_number_char(ch: str) -> bool:
    """Return True if ch may appear in a number literal."""
    return is_digit(ch) or ch in "._"


def is_horizontal_ws(ch: str) -> bool:
    return ch in " \t"
