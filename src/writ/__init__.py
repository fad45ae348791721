"""writ markup expansion language."""

from __future__ import annotations

from pathlib import Path

__version__ = "0.1.0"


def compile(
    source: str,
    filename: str = "input.write",
    variables: dict[str, str] | None = None,
    module_paths: list[Path] | None = None,
) -> str:
    """Lex, parse and expand writ source, returning the trimmed output text."""
    from writ.document import new_document
    from writ.expand import expand
    from writ.parser import parse
    from writ.strings import strip_ascii

    values = parse(source, filename)
    doc = new_document(filename, source, variables=variables, module_paths=module_paths)
    return strip_ascii(expand(values, doc))
