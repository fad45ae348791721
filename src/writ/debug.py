"""--debug token and tree dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from writ.ast import Call, Def, Number, Text, Use, Value, Variable
from writ.tokens import Token, TokenType


def dump_tokens(tokens: list[Token], *, file: TextIO | None = None) -> None:
    """Print one token per line with its position."""
    file = file or sys.stderr
    for tok in tokens:
        if tok.type == TokenType.EOF:
            continue
        pos = tok.span.start
        file.write(f"{pos.line}:{pos.column} {tok.type.name} {tok.raw!r}\n")


def dump_ast(values: list[Value], *, file: TextIO | None = None) -> None:
    """Print a human-readable tree of top-level values to *file* (default stderr)."""
    file = file or sys.stderr
    file.write("Document\n")
    for value in values:
        _dump_value(value, 1, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_value(value: Value, depth: int, f: TextIO) -> None:
    if isinstance(value, Text):
        f.write(f"{_indent(depth)}Text({value.value!r})\n")
    elif isinstance(value, Number):
        f.write(f"{_indent(depth)}Number({value.value!r})\n")
    elif isinstance(value, Call):
        f.write(f"{_indent(depth)}Call ({value.name})\n")
        for group in value.args:
            f.write(f"{_indent(depth + 1)}Args[{group.index}]\n")
            for child in group.values:
                _dump_value(child, depth + 2, f)
    elif isinstance(value, Use):
        kind = "internal" if value.internal else "file"
        f.write(f"{_indent(depth)}Use {value.module} ({kind})\n")
    elif isinstance(value, Def):
        params = " ".join(f"${a}" for a in value.args)
        f.write(f"{_indent(depth)}Def {value.name} {params}".rstrip() + "\n")
        for child in value.body:
            _dump_value(child, depth + 1, f)
    elif isinstance(value, Variable):
        if value.value is None:
            f.write(f"{_indent(depth)}Ref #{value.name}\n")
            return
        keyword = "set" if value.is_set else "let"
        f.write(f"{_indent(depth)}Variable #{keyword} {value.name}\n")
        for child in value.value:
            _dump_value(child, depth + 1, f)
