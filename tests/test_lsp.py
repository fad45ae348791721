"""Tests for the LSP server: diagnostic generation."""

from __future__ import annotations

from pathlib import Path

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from writ.lsp import _validate

URI = "file:///test.write"


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = URI) -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="writ", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Lex errors → Error severity
# ---------------------------------------------------------------------------


class TestLexErrors:
    def test_invalid_escape(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put(r"Hello \z world")
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert "\\z" in d.message
        assert d.source == "writ"
        # \z is at column 7 (1-based) → character 6 (0-based)
        assert d.range.start.line == 0
        assert d.range.start.character == 6


# ---------------------------------------------------------------------------
# Parse errors → Error severity
# ---------------------------------------------------------------------------


class TestParseErrors:
    def test_unclosed_call(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("(bold hello")
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert d.message == "expected ')' but found EOF"
        assert d.source == "writ"


# ---------------------------------------------------------------------------
# Expansion errors → Warning severity
# ---------------------------------------------------------------------------


class TestExpandErrors:
    def test_undefined_macro(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("text\n(site a | b)")
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Warning
        assert d.message == "no macro or variable 'site' was defined"
        assert d.source == "writ"
        assert d.range.start.line == 1
        assert d.range.start.character == 0

    def test_call_chain_in_message(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("#def outer x(missing)#end(outer)")
        _validate(ls, URI)

        [d] = published[0].diagnostics
        assert d.message.endswith("(in expansion: (outer))")

    def test_broken_module_reported_at_use(self, lsp_env, tmp_path: Path) -> None:
        ls, published, put = lsp_env
        (tmp_path / "broken.write").write_text("(unclosed", encoding="utf-8")
        uri = (tmp_path / "doc.write").as_uri()
        put("\n#use broken\n", uri)
        _validate(ls, uri)

        diags = published[0].diagnostics
        assert len(diags) == 2
        assert diags[0].message.endswith("broken.write: expected ')' but found EOF")
        assert diags[1].message == "failed to import module 'broken'"
        assert all(d.range.start.line == 1 for d in diags)


# ---------------------------------------------------------------------------
# Clean document → empty diagnostics
# ---------------------------------------------------------------------------


class TestCleanDocument:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("#use html\n#let who World\n(bold Hello #who)\n")
        _validate(ls, URI)

        assert len(published) == 1
        assert published[0].diagnostics == []


# ---------------------------------------------------------------------------
# Position conversion (1-based → 0-based)
# ---------------------------------------------------------------------------


class TestPositionConversion:
    def test_error_on_second_line(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("Valid first line\n\\z oops")
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        # Error is on line 2 (1-based) → LSP line 1 (0-based)
        assert d.range.start.line == 1
        assert d.range.start.character == 0
