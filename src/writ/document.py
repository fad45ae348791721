"""Per-file expansion state: macro and variable tables plus collected errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from writ.ast import Def, Text, Variable
from writ.builtins import builtin_bodies
from writ.errors import ExpandError
from writ.strings import scan_placeholders
from writ.tokens import Position, Span

# Span for definitions that do not come from any source text
BUILTIN_SPAN = Span(Position(0, 0, 0), Position(0, 0, 0))


@dataclass
class Document:
    """State carried through expansion of one top-level source file."""

    input_path: Path
    input_filename: str
    source: str = ""
    publish_date: datetime = field(default_factory=datetime.now)
    defines: dict[str, Def] = field(default_factory=dict)
    variables: dict[str, Variable] = field(default_factory=dict)
    errors: list[ExpandError] = field(default_factory=list)
    module_paths: list[Path] = field(default_factory=list)
    call_stack: list[str] = field(default_factory=list)

    def define(self, definition: Def) -> None:
        """Register a macro; a later definition replaces an earlier one."""
        self.defines[definition.name] = definition

    def define_text(self, name: str, body: str) -> Def:
        """Register a macro from plain body text, deriving its parameters.

        Every ``$name`` in the body becomes a parameter, in order of first
        appearance.
        """
        definition = Def(
            name,
            tuple(scan_placeholders(body)),
            (Text(body, BUILTIN_SPAN),),
            BUILTIN_SPAN,
        )
        self.define(definition)
        return definition

    def let(self, name: str, value: str) -> None:
        """Bind a variable to literal text, as #let would."""
        self.variables[name] = Variable(name, (Text(value, BUILTIN_SPAN),), False, BUILTIN_SPAN)

    def error(self, message: str, *hints: str) -> ExpandError:
        """Record an expansion error and return it for the caller to raise."""
        err = ExpandError(message, hints, call_stack=list(self.call_stack))
        self.errors.append(err)
        return err


def new_document(
    filename: str = "input.write",
    source: str = "",
    *,
    variables: dict[str, str] | None = None,
    module_paths: list[Path] | None = None,
    now: datetime | None = None,
) -> Document:
    """Create a Document for filename with the builtin macros registered."""
    input_path = Path(filename).parent
    if not input_path.parts:
        input_path = Path(".")
    doc = Document(
        input_path=input_path,
        input_filename=Path(filename).name,
        source=source,
        module_paths=list(module_paths or []),
    )
    if now is not None:
        doc.publish_date = now
    for name, body in builtin_bodies(doc.publish_date).items():
        doc.define_text(name, body)
    for name, value in (variables or {}).items():
        doc.let(name, value)
    return doc
