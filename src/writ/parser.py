"""writ parser: converts a token stream into a list of top-level values."""

from __future__ import annotations

from writ.ast import ArgList, Call, Def, Number, Text, Use, Value, Variable
from writ.builtins import INTERNAL_MODULES
from writ.errors import ParseError
from writ.lexer import tokenize
from writ.strings import ASCII_WHITESPACE, strip_ascii
from writ.tokens import Position, Span, Token, TokenType


class Parser:
    """Recursive descent parser for writ token streams."""

    def __init__(self, tokens: list[Token], source: str, filename: str) -> None:
        self._tokens = tokens
        self._source = source
        self._filename = filename
        self._pos = 0
        self._call_depth = 0
        self.errors: list[str] = []

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self) -> Token:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return self._tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _at_eof(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _prev_end(self) -> Position:
        """End position of the previously consumed token."""
        if self._pos > 0:
            return self._tokens[self._pos - 1].span.end
        return self._tokens[0].span.start

    def _expect_name(self, what: str) -> Token:
        """Consume the IDENTIFIER following a directive; it must not be blank."""
        tok = self._peek()
        if tok.type != TokenType.IDENTIFIER:
            raise self._expected(what, tok)
        self._advance()
        if not strip_ascii(tok.value):
            raise self._expected(what, self._peek())
        return tok

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def parse(self) -> list[Value]:
        values: list[Value] = []
        while not self._at_eof():
            if self._at(TokenType.COMMENT):
                self._advance()
                continue
            value = self._parse_value()
            if value is not None:
                values.append(value)
        return values

    def _parse_value(self) -> Value | None:
        tok = self._peek()
        tt = tok.type

        if tt in (TokenType.LET, TokenType.SET):
            return self._parse_binding()
        if tt == TokenType.VARIABLE:
            self._advance()
            return Variable(tok.value, None, False, tok.span)
        if tt == TokenType.USE:
            return self._parse_use()
        if tt == TokenType.DEF:
            return self._parse_def()
        if tt == TokenType.LPAREN:
            return self._parse_call()
        if tt == TokenType.NUMBER:
            self._advance()
            return Number(tok.number, tok.span)
        if tt in (
            TokenType.TEXT,
            TokenType.ESCAPE,
            TokenType.HASH,
            TokenType.FSLASH,
            TokenType.PIPE,
        ):
            self._advance()
            return Text(tok.value, tok.span)
        if tt == TokenType.ARGUMENT:
            # Placeholder text outside the parameter list, e.g. after an escape
            self._advance()
            return Text(f"${tok.value}", tok.span)
        if tt == TokenType.COMMENT:
            self._advance()
            return None

        raise self._expected("value", tok)

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def _parse_binding(self) -> Variable:
        kw = self._advance()
        name_tok = self._expect_name("variable name")
        values = self._parse_line()
        return Variable(
            name_tok.value,
            values,
            kw.type == TokenType.SET,
            Span(kw.span.start, self._prev_end()),
        )

    def _parse_line(self) -> tuple[Value, ...]:
        """Parse a #let/#set value: everything up to the end of the line."""
        values: list[Value] = []
        raw: list[bool] = []
        while True:
            tok = self._peek()
            if tok.type in (TokenType.EOF, TokenType.END, TokenType.RPAREN):
                break
            if tok.type == TokenType.PIPE and self._call_depth > 0:
                break
            if tok.type == TokenType.COMMENT:
                self._advance()
                break
            if tok.type == TokenType.TEXT and "\n" in tok.value:
                self._advance()
                break
            value = self._parse_value()
            if value is not None:
                values.append(value)
                raw.append(tok.type == TokenType.TEXT)
        return tuple(_trim_line(values, raw))

    def _parse_use(self) -> Use:
        kw = self._advance()
        name_tok = self._expect_name("module name")
        module = strip_ascii(name_tok.value)
        return Use(module, module in INTERNAL_MODULES, Span(kw.span.start, name_tok.span.end))

    def _parse_def(self) -> Def:
        kw = self._advance()
        name_tok = self._expect_name("macro name")

        args: list[str] = []
        while True:
            tok = self._peek()
            if tok.type == TokenType.ARGUMENT:
                if not tok.value:
                    raise self._expected("argument name after '$'", tok)
                args.append(tok.value)
                self._advance()
                continue
            if tok.type in (
                TokenType.TEXT,
                TokenType.ESCAPE,
                TokenType.COMMENT,
                TokenType.END,
            ):
                break
            if tok.type == TokenType.EOF:
                raise self._expected("#end", tok)
            raise self._expected("argument or body text", tok)

        # Pipes inside a body are text even when the def sits inside a call
        saved_depth = self._call_depth
        self._call_depth = 0
        body: list[Value] = []
        while not self._at(TokenType.END):
            if self._at_eof():
                raise self._expected("#end", self._peek())
            value = self._parse_value()
            if value is not None:
                body.append(value)
        self._call_depth = saved_depth

        end_tok = self._advance()
        return Def(
            name_tok.value,
            tuple(args),
            tuple(body),
            Span(kw.span.start, end_tok.span.end),
        )

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _parse_call(self) -> Call:
        open_tok = self._advance()  # consume LPAREN
        name_tok = self._peek()
        if name_tok.type != TokenType.IDENTIFIER:
            raise self._expected("macro name", name_tok)
        self._advance()

        groups: list[ArgList] = []
        current: list[Value] = []
        group_start = self._peek().span.start

        self._call_depth += 1
        while not self._at(TokenType.RPAREN):
            tok = self._peek()
            if tok.type == TokenType.EOF:
                raise self._expected("')'", tok)
            if tok.type == TokenType.PIPE:
                groups.append(ArgList(len(groups), tuple(current), Span(group_start, tok.span.start)))
                self._advance()
                current = []
                group_start = self._peek().span.start
                continue
            value = self._parse_value()
            if value is not None:
                current.append(value)
        self._call_depth -= 1

        close_tok = self._advance()
        if current or groups:
            groups.append(ArgList(len(groups), tuple(current), Span(group_start, close_tok.span.start)))
        return Call(name_tok.value, tuple(groups), Span(open_tok.span.start, close_tok.span.end))

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _expected(self, what: str, found: Token) -> ParseError:
        return self._error(f"expected {what} but found {found.describe()}", found.span)

    def _error(self, message: str, span: Span | None = None) -> ParseError:
        if span is None:
            span = self._peek().span
        self.errors.append(message)
        return ParseError(message, span, self._source)


def _trim_line(values: list[Value], raw: list[bool]) -> list[Value]:
    """Strip ASCII whitespace from the text at both ends of a #let value.

    Only text lexed from source is trimmed; whitespace written as an escape
    (\\s, \\t, \\n) is kept.
    """
    items = list(values)
    raw = list(raw)
    while items and raw[0] and isinstance(items[0], Text):
        stripped = items[0].value.lstrip(ASCII_WHITESPACE)
        if stripped:
            items[0] = Text(stripped, items[0].span)
            break
        items.pop(0)
        raw.pop(0)
    while items and raw[-1] and isinstance(items[-1], Text):
        stripped = items[-1].value.rstrip(ASCII_WHITESPACE)
        if stripped:
            items[-1] = Text(stripped, items[-1].span)
            break
        items.pop()
        raw.pop()
    return items


def parse(source: str, filename: str = "input.write") -> list[Value]:
    """Convenience function: parse source text and return top-level values."""
    tokens = tokenize(source, filename)
    return Parser(tokens, source, filename).parse()
