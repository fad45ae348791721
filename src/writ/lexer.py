"""writ lexer: converts source text into a flat token stream."""

from __future__ import annotations

from collections.abc import Callable

from writ.errors import LexError
from writ.strings import strip_ascii
from writ.tokens import (
    KEYWORDS,
    Position,
    Span,
    Token,
    TokenType,
    is_digit,
    is_horizontal_ws,
    is_ident_char,
    is_number_char,
    is_text_char,
)

_ESCAPES: dict[str, str] = {
    "(": "(",
    ")": ")",
    "#": "#",
    "$": "$",
    "\\": "\\",
    "n": "\n",
    "s": " ",
    "t": "\t",
}


class Lexer:
    """Tokenize writ source text into a stream of Token objects.

    Each step looks at the next rune and hands control to the first handler
    in the dispatch table whose predicate matches. The last entry always
    matches.
    """

    def __init__(self, source: str, filename: str = "input.write") -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []
        self._dispatch: list[tuple[Callable[[str], bool], Callable[[], None]]] = [
            (lambda ch: ch == "\\", self._lex_escape),
            (lambda ch: ch == "$", self._lex_argument),
            (lambda ch: ch == "(", self._lex_call_open),
            (lambda ch: ch == ")", self._lex_call_close),
            (lambda ch: ch == "#", self._lex_directive),
            (lambda ch: ch == "|", self._lex_pipe),
            (lambda ch: ch == "/", self._lex_slash),
            (is_digit, self._lex_number),
            (is_text_char, self._lex_text),
            (lambda ch: True, self._lex_ws),
        ]

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            ch = self._peek()
            for matches, handler in self._dispatch:
                if matches(ch):
                    handler()
                    break

        self._emit(TokenType.EOF, "", "")
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(
        self,
        tt: TokenType,
        value: str,
        raw: str,
        start: Position | None = None,
        number: float = 0.0,
    ) -> Token:
        end = self._current_pos()
        if start is None:
            start = end
        tok = Token(tt, value, raw, Span(start, end), number)
        self._tokens.append(tok)
        return tok

    def _error(self, message: str, pos: Position | None = None) -> LexError:
        if pos is None:
            pos = self._current_pos()
        return LexError(message, pos, self._source)

    def _take_while(self, pred: Callable[[str], bool]) -> str:
        chars = []
        while self._pos < len(self._source) and pred(self._peek()):
            chars.append(self._advance())
        return "".join(chars)

    def _skip_ws(self) -> None:
        self._take_while(str.isspace)

    def _skip_horizontal_ws(self) -> None:
        self._take_while(is_horizontal_ws)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _lex_escape(self) -> None:
        start = self._current_pos()
        self._advance()  # consume backslash

        if self._pos >= len(self._source):
            raise self._error("unexpected end of input after '\\'", start)

        ch = self._peek()
        if ch not in _ESCAPES:
            raise self._error(f"unknown escape sequence '\\{ch}'", start)
        self._advance()
        self._emit(TokenType.ESCAPE, _ESCAPES[ch], f"\\{ch}", start)

    def _lex_argument(self) -> None:
        start = self._current_pos()
        self._advance()  # consume $
        name = self._take_while(is_ident_char)
        self._emit(TokenType.ARGUMENT, name, f"${name}", start)
        self._skip_ws()

    def _lex_call_open(self) -> None:
        start = self._current_pos()
        self._advance()
        self._emit(TokenType.LPAREN, "(", "(", start)

        name_start = self._current_pos()
        name = self._take_while(is_ident_char)
        if not name:
            raise self._error("expected macro name after '('", name_start)
        self._emit(TokenType.IDENTIFIER, name, name, name_start)

    def _lex_call_close(self) -> None:
        start = self._current_pos()
        self._advance()
        self._emit(TokenType.RPAREN, ")", ")", start)

    def _lex_directive(self) -> None:
        start = self._current_pos()
        self._advance()  # consume #

        if self._peek() == "!":
            self._advance()
            text = self._take_while(lambda ch: ch != "\n")
            self._emit(TokenType.COMMENT, strip_ascii(text), f"#!{text}", start)
            self._skip_ws()
            return

        name = self._take_while(is_ident_char)
        if not name:
            self._emit(TokenType.HASH, "#", "#", start)
            return

        keyword = KEYWORDS.get(name)
        if keyword is None:
            self._emit(TokenType.VARIABLE, name, f"#{name}", start)
            return

        self._emit(keyword, name, f"#{name}", start)
        if keyword == TokenType.END:
            return

        # let/set/use/def take a name, which the parser validates
        self._skip_horizontal_ws()
        ident_start = self._current_pos()
        ident = self._take_while(is_ident_char)
        self._emit(TokenType.IDENTIFIER, ident, ident, ident_start)
        self._skip_horizontal_ws()

    def _lex_pipe(self) -> None:
        start = self._current_pos()
        self._advance()
        self._emit(TokenType.PIPE, "|", "|", start)

    def _lex_slash(self) -> None:
        start = self._current_pos()
        self._advance()
        self._emit(TokenType.FSLASH, "/", "/", start)

    def _lex_number(self) -> None:
        start = self._current_pos()
        text = self._take_while(is_number_char)
        try:
            value = float(text)
        except ValueError:
            raise self._error(f"invalid number literal '{text}'", start) from None
        self._emit(TokenType.NUMBER, text, text, start, value)

    def _lex_text(self) -> None:
        start = self._current_pos()
        text = self._take_while(is_text_char)
        # Whitespace-only runs between tokens are dropped
        if strip_ascii(text):
            self._emit(TokenType.TEXT, text, text, start)

    def _lex_ws(self) -> None:
        start = self._current_pos()
        text = self._take_while(str.isspace)
        if not text:
            raise self._error(f"unexpected character {self._peek()!r}", start)
        self._emit(TokenType.TEXT, text, text, start)


def tokenize(source: str, filename: str = "input.write") -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, filename).tokenize()
