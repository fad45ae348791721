"""#use resolution: builtin module sources and sibling .write files."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from writ.ast import Def, Use, Value, Variable
from writ.builtins import MODULE_SOURCES
from writ.document import Document
from writ.errors import ExpandError, LexError, ParseError
from writ.expand import expand_value
from writ.parser import parse
from writ.tokens import Position, Span

MODULE_SUFFIX = ".write"


@lru_cache(maxsize=None)
def internal_module(name: str) -> tuple[Value, ...]:
    """Parse a compiled-in module once; raises KeyError for unknown names."""
    return tuple(parse(MODULE_SOURCES[name], f"<{name}>"))


def module_candidates(name: str, doc: Document) -> list[Path]:
    """Files that may hold module name: next to the input, then module paths."""
    filename = f"{name}{MODULE_SUFFIX}"
    return [doc.input_path / filename, *(d / filename for d in doc.module_paths)]


def import_module(use: Use, doc: Document) -> None:
    """Load a module and register its definitions and bindings on doc.

    Only #def and #let/#set at the module's top level are carried over;
    text, calls and nested #use directives there are ignored.
    """
    if use.internal:
        if use.module not in MODULE_SOURCES:
            available = ", ".join(sorted(MODULE_SOURCES))
            raise doc.error(
                f"unknown internal module '{use.module}'",
                f"internal modules with definitions: {available}",
            )
        values = internal_module(use.module)
    else:
        values = _load_file_module(use.module, doc)

    for value in values:
        if isinstance(value, Def) or (isinstance(value, Variable) and value.value is not None):
            expand_value(value, doc)


def _load_file_module(name: str, doc: Document) -> tuple[Value, ...]:
    candidates = module_candidates(name, doc)
    path = next((p for p in candidates if p.is_file()), candidates[0])

    try:
        source = path.read_text(encoding="utf-8")
    except OSError:
        raise doc.error(
            f"could not read module '{name}'",
            f"expected a file named '{name}{MODULE_SUFFIX}' in {doc.input_path}",
        ) from None

    try:
        return tuple(parse(source, str(path)))
    except LexError as exc:
        pos = exc.position
        span = Span(pos, Position(pos.line, pos.column + 1, pos.offset + 1))
        _record(doc, exc.message, span, source, path)
    except ParseError as exc:
        _record(doc, exc.message, exc.span, source, path)
    raise doc.error(f"failed to import module '{name}'")


def _record(doc: Document, message: str, span: Span, source: str, path: Path) -> None:
    doc.errors.append(ExpandError(message, span=span, source=source, filename=str(path)))
