"""Builtin macros and the compiled-in module sources."""

from __future__ import annotations

from datetime import datetime

# Names #use resolves without touching the filesystem
INTERNAL_MODULES: frozenset[str] = frozenset({"text", "html", "markdown"})


def _date_body(now: datetime) -> str:
    return f"{now.year},{now.month},{now.day}"


def _time_body(now: datetime) -> str:
    return f"{now.hour}:{now.minute}:{now.second}"


def builtin_bodies(now: datetime) -> dict[str, str]:
    """Return the body text of every builtin macro, keyed by macro name."""
    return {
        # identity, handy for wrapping text that contains escaped parens
        ".": "$value",
        "/date": _date_body(now),
        "/time": _time_body(now),
    }


HTML_MODULE = r"""#! html flavoured formatting macros
#def bold $text <strong>$text</strong>#end
#def italic $text <em>$text</em>#end
#def highlight $text <mark>$text</mark>#end
#def strike $text <s>$text</s>#end
#def line <hr>#end
#def sub $text <sub>$text</sub>#end
#def sup $text <sup>$text</sup>#end
#def var $text <code>$text</code>#end
#def ' $text &lsquo;$text&rsquo;#end
#def " $text &ldquo;$text&rdquo;#end
#def / $text \($text\)#end
#def - &mdash;#end
#def list $items <ul>$items</ul>#end
#def item $text <li>$text</li>#end
#def break <br>#end
#def section $title <h2>$title</h2>#end
"""

MARKDOWN_MODULE = r"""#! markdown flavoured formatting macros
#def bold $text **$text**#end
#def italic $text *$text*#end
#def highlight $text ==$text==#end
#def strike $text ~~$text~~#end
#def line ---#end
#def sub $text <sub>$text</sub>#end
#def sup $text <sup>$text</sup>#end
#def var $text `$text`#end
#def ' $text ‘$text’#end
#def " $text “$text”#end
#def / $text \($text\)#end
#def - —#end
#def list $items \n$items\n#end
#def item $text - $text#end
#def break \s\s\n#end
#def section $title \#\# $title#end
"""

# "text" is recognised as internal but ships no definitions
MODULE_SOURCES: dict[str, str] = {
    "html": HTML_MODULE,
    "markdown": MARKDOWN_MODULE,
}
