"""Error types with formatted source context."""

from __future__ import annotations

from writ.tokens import Position, Span


def _snippet(message: str, span: Span, source: str, filename: str) -> str:
    """Render a one-line message followed by the offending source line."""
    lines = source.splitlines(keepends=True)
    line_idx = span.start.line - 1
    col = span.start.column

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    # Underline the full span when on one line, otherwise to end of line
    if span.end.line == span.start.line:
        underline_len = max(1, span.end.column - col)
    else:
        underline_len = max(1, len(source_line) - col + 1)

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(span.start.line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{span.start.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class LexError(Exception):
    """Raised on the first lexing error, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.write") -> str:
        pos = self.position
        span = Span(pos, Position(pos.line, pos.column + 1, pos.offset + 1))
        return _snippet(self.message, span, self.source, filename)


class ParseError(Exception):
    """Raised on the first parse error, with span and source context."""

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.write") -> str:
        return _snippet(self.message, self.span, self.source, filename)


class ExpandError(Exception):
    """A single expansion diagnostic, collected on the Document."""

    def __init__(
        self,
        message: str,
        hints: tuple[str, ...] | list[str] = (),
        span: Span | None = None,
        source: str = "",
        call_stack: list[str] | None = None,
        filename: str | None = None,
    ) -> None:
        self.message = message
        self.hints = tuple(hints)
        self.span = span
        self.source = source
        self.call_stack = call_stack or []
        self.filename = filename
        super().__init__(message)

    def format(self, filename: str = "input.write") -> str:
        # Errors raised inside a module point at the module file
        filename = self.filename or filename
        if self.span is not None and self.source:
            result = _snippet(self.message, self.span, self.source, filename)
        else:
            result = f"error: {self.message}"
        if self.call_stack:
            chain = " -> ".join(f"({name})" for name in self.call_stack)
            result += f"\n  in expansion chain: {chain}"
        if self.hints:
            result += "".join(f"\n  = hint: {hint}" for hint in self.hints)
            result += "\n"
        return result


class ExpansionFailed(Exception):
    """Raised when expansion stops; carries every error the Document collected."""

    def __init__(self, errors: list[ExpandError]) -> None:
        self.errors = list(errors)
        super().__init__(self.format())

    def format(self, filename: str = "input.write") -> str:
        return "\n".join(err.format(filename) for err in self.errors)
