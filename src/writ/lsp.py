"""Minimal LSP server for writ, diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path

from writ import __version__
from writ.document import new_document
from writ.errors import ExpansionFailed, LexError, ParseError
from writ.expand import expand
from writ.parser import parse
from writ.tokens import Span

server = LanguageServer("writ-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _range(span: Span) -> Range:
    return Range(
        start=Position(line=span.start.line - 1, character=span.start.column - 1),
        end=Position(line=span.end.line - 1, character=span.end.column - 1),
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the writ pipeline and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = to_fs_path(uri) or uri
    diagnostics: list[Diagnostic] = []

    try:
        values = parse(source, filename)
    except LexError as exc:
        line = exc.position.line - 1
        col = exc.position.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="writ",
            )
        )
    except ParseError as exc:
        diagnostics.append(
            Diagnostic(
                range=_range(exc.span),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="writ",
            )
        )
    else:
        try:
            expand(values, new_document(filename, source))
        except ExpansionFailed as exc:
            # The last error is the one located at the failing top-level value
            fallback = exc.errors[-1].span
            for err in exc.errors:
                span = err.span if err.filename is None and err.span else fallback
                if span is None:
                    continue
                message = err.message
                if err.filename is not None:
                    message = f"{err.filename}: {message}"
                if err.call_stack:
                    chain = " -> ".join(f"({name})" for name in err.call_stack)
                    message += f" (in expansion: {chain})"
                diagnostics.append(
                    Diagnostic(
                        range=_range(span),
                        message=message,
                        severity=DiagnosticSeverity.Warning,
                        source="writ",
                    )
                )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
