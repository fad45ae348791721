"""End-to-end examples: source in, expanded text out."""

from __future__ import annotations

import pytest

import writ
from writ.errors import ExpansionFailed


class TestExamples:
    def test_bold_with_html(self, run):
        source = "#use html\n(bold Hello, this is a test.)"
        assert run(source) == "<strong>Hello, this is a test.</strong>"

    def test_escaped_parens_and_slash_macro(self, run):
        source = "#use html\nThis \\(could be\\) a (/ decent) test."
        assert run(source) == "This (could be) a (decent) test."

    def test_variables_with_markdown(self, run):
        source = (
            "#use markdown\n"
            "#let a-variable Hello, I am a (bold variable).\n"
            "#a-variable\n"
            "#set a-variable Now my value is 10\n"
            "#a-variable\n"
        )
        assert run(source) == "Hello, I am a **variable**.\nNow my value is 10"

    def test_undefined_macro(self, run):
        with pytest.raises(ExpansionFailed) as exc_info:
            run("(site a | b)")
        [err] = exc_info.value.errors
        assert err.message == "no macro or variable 'site' was defined"

    def test_arity_mismatch(self, run):
        source = '#def site $url $text <a href="http://$url">$text</a> #end\n(site a)'
        with pytest.raises(ExpansionFailed) as exc_info:
            run(source)
        [err] = exc_info.value.errors
        assert err.message == "macro 'site' expects 2 argument(s) but was given 1"


class TestCompile:
    def test_compile(self):
        assert writ.compile("#use html\n(bold x)") == "<strong>x</strong>"

    def test_compile_with_variables(self):
        assert writ.compile("Hi #who", variables={"who": "there"}) == "Hi there"

    def test_document_level(self):
        source = (
            "#! a small page\n"
            "#use html\n"
            "#def link $url $text <a href=\"$url\">$text</a>#end\n"
            "#let home example.org\n"
            "(section Welcome)\n"
            "See (link #home | (italic home)).\n"
        )
        assert writ.compile(source) == (
            '<h2>Welcome</h2>\nSee <a href="example.org"><em>home</em></a>.'
        )
