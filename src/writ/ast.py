"""AST node types for parsed writ sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from writ.tokens import Span


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text, copied verbatim on expansion."""

    value: str
    span: Span


@dataclass(frozen=True, slots=True)
class Number:
    value: float
    span: Span


@dataclass(frozen=True, slots=True)
class ArgList:
    """One pipe-delimited argument group; index 0 has no preceding pipe."""

    index: int
    values: tuple[Value, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class Call:
    """A macro or variable invocation: (name a | b)."""

    name: str
    args: tuple[ArgList, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class Use:
    """#use directive; internal modules are compiled in."""

    module: str
    internal: bool
    span: Span


@dataclass(frozen=True, slots=True)
class Def:
    """#def name $arg... body #end"""

    name: str
    args: tuple[str, ...]
    body: tuple[Value, ...]
    span: Span


@dataclass(frozen=True, slots=True)
class Variable:
    """#let / #set binding, or a bare #name reference when value is None."""

    name: str
    value: tuple[Value, ...] | None
    is_set: bool
    span: Span


Value = Union[Text, Number, Call, Use, Def, Variable]
