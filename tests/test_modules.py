"""Tests for #use: compiled-in modules and .write files on disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from writ.builtins import MODULE_SOURCES
from writ.document import new_document
from writ.errors import ExpansionFailed
from writ.expand import expand
from writ.modules import internal_module, module_candidates
from writ.parser import parse
from writ.strings import strip_ascii

from tests.conftest import NOW


def _run_file(path: Path, source: str, **kwargs) -> str:
    doc = new_document(str(path), source, now=NOW, **kwargs)
    return strip_ascii(expand(parse(source, str(path)), doc))


class TestInternalModules:
    @pytest.mark.parametrize(
        "module, expected",
        [("html", "<strong>hi</strong>"), ("markdown", "**hi**")],
    )
    def test_bold(self, run, module, expected):
        assert run(f"#use {module}\n(bold hi)") == expected

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("(italic x)", "<em>x</em>"),
            ("(var x)", "<code>x</code>"),
            ("(' x)", "&lsquo;x&rsquo;"),
            ('(" x)', "&ldquo;x&rdquo;"),
            ("(/ x)", "(x)"),
            ("a(-)b", "a&mdash;b"),
            ("(list (item a)(item b))", "<ul><li>a</li><li>b</li></ul>"),
            ("(section Intro)", "<h2>Intro</h2>"),
        ],
    )
    def test_html_macros(self, run, source, expected):
        assert run(f"#use html\n{source}") == expected

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("(italic x)", "*x*"),
            ("(strike x)", "~~x~~"),
            ("(var x)", "`x`"),
            ("(section Intro)", "## Intro"),
            ("(line)", "---"),
        ],
    )
    def test_markdown_macros(self, run, source, expected):
        assert run(f"#use markdown\n{source}") == expected

    def test_later_module_overrides(self, run):
        assert run("#use html\n#use markdown\n(bold x)") == "**x**"

    def test_text_module_has_no_source(self, run):
        with pytest.raises(ExpansionFailed) as exc_info:
            run("#use text\n")
        [err] = exc_info.value.errors
        assert err.message == "unknown internal module 'text'"
        assert err.hints == ("internal modules with definitions: html, markdown",)

    @pytest.mark.parametrize("name", sorted(MODULE_SOURCES))
    def test_sources_parse(self, name):
        values = internal_module(name)
        assert values

    def test_parsed_once(self):
        assert internal_module("html") is internal_module("html")


class TestFileModules:
    def test_sibling_file(self, tmp_path):
        (tmp_path / "links.write").write_text(
            "#def site $url $text <a href=\"http://$url\">$text</a>#end\n", encoding="utf-8"
        )
        doc_path = tmp_path / "doc.write"
        out = _run_file(doc_path, "#use links\n(site x.org | X)")
        assert out == '<a href="http://x.org">X</a>'

    def test_module_variables(self, tmp_path):
        (tmp_path / "vars.write").write_text("#let author Ada\n", encoding="utf-8")
        out = _run_file(tmp_path / "doc.write", "#use vars\nby #author")
        assert out == "by Ada"

    def test_module_text_is_not_output(self, tmp_path):
        (tmp_path / "noisy.write").write_text(
            "loud text\n#def m quiet#end\n(m)\n", encoding="utf-8"
        )
        out = _run_file(tmp_path / "doc.write", "#use noisy\n(m)")
        assert out == "quiet"

    def test_nested_use_ignored(self, tmp_path):
        (tmp_path / "outer.write").write_text("#use html\n#def m x#end\n", encoding="utf-8")
        with pytest.raises(ExpansionFailed, match="no macro or variable 'bold'"):
            _run_file(tmp_path / "doc.write", "#use outer\n(bold y)")

    def test_module_path(self, tmp_path):
        lib = tmp_path / "lib"
        lib.mkdir()
        (lib / "extra.write").write_text("#def hi hello#end", encoding="utf-8")
        out = _run_file(tmp_path / "doc.write", "#use extra\n(hi)", module_paths=[lib])
        assert out == "hello"

    def test_sibling_before_module_path(self, tmp_path):
        lib = tmp_path / "lib"
        lib.mkdir()
        (lib / "m.write").write_text("#def hi lib#end", encoding="utf-8")
        (tmp_path / "m.write").write_text("#def hi sibling#end", encoding="utf-8")
        out = _run_file(tmp_path / "doc.write", "#use m\n(hi)", module_paths=[lib])
        assert out == "sibling"

    def test_candidates(self, tmp_path):
        doc = new_document(str(tmp_path / "doc.write"), module_paths=[Path("lib")])
        assert module_candidates("x", doc) == [tmp_path / "x.write", Path("lib") / "x.write"]


class TestFileModuleErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ExpansionFailed) as exc_info:
            _run_file(tmp_path / "doc.write", "#use absent\n")
        [err] = exc_info.value.errors
        assert err.message == "could not read module 'absent'"
        assert err.hints == (f"expected a file named 'absent.write' in {tmp_path}",)
        assert err.span.start.line == 1

    def test_broken_module(self, tmp_path):
        (tmp_path / "broken.write").write_text("ok\n(unclosed", encoding="utf-8")
        with pytest.raises(ExpansionFailed) as exc_info:
            _run_file(tmp_path / "doc.write", "#use broken\n")
        first, second = exc_info.value.errors
        assert first.message == "expected ')' but found EOF"
        assert first.filename == str(tmp_path / "broken.write")
        assert first.span.start.line == 2
        assert second.message == "failed to import module 'broken'"

    def test_broken_module_lex_error(self, tmp_path):
        (tmp_path / "bad.write").write_text("\\q", encoding="utf-8")
        with pytest.raises(ExpansionFailed) as exc_info:
            _run_file(tmp_path / "doc.write", "#use bad\n")
        first, _ = exc_info.value.errors
        assert first.message == "unknown escape sequence '\\q'"
        formatted = exc_info.value.format("doc.write")
        assert f"--> {tmp_path / 'bad.write'}:1:1" in formatted
        assert "--> doc.write:1:1" in formatted
