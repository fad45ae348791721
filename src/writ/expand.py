"""Tree-walking expander: turns parsed values into output text."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from writ.ast import Call, Def, Number, Text, Use, Value, Variable
from writ.document import BUILTIN_SPAN, Document
from writ.errors import ExpandError, ExpansionFailed
from writ.strings import format_number, strip_ascii, substitute


def expand(values: Iterable[Value], doc: Document) -> str:
    """Expand top-level values in order and return the concatenated text.

    Stops at the first value that fails and raises ExpansionFailed with every
    error the document collected, including ones recorded before the failure
    (a broken module reports its own parse error as well as the import).
    """
    parts: list[str] = []
    for value in values:
        try:
            text = expand_value(value, doc)
        except ExpandError as err:
            _locate(err, value, doc)
            raise _collected(doc) from None
        except RecursionError:
            err = doc.error(
                "expansion recursed too deeply",
                "macro calls or variable references nest too deeply, or one refers to itself",
            )
            _locate(err, value, doc)
            raise _collected(doc) from None
        if text:
            parts.append(text)
    return "".join(parts)


def _locate(err: ExpandError, value: Value, doc: Document) -> None:
    """Point an error without a position at the top-level value that failed.

    Values with no source text, such as configured prelude imports, leave
    the error unlocated.
    """
    if err not in doc.errors:
        doc.errors.append(err)
    if err.span is None and value.span != BUILTIN_SPAN:
        err.span = value.span
        err.source = doc.source


def _collected(doc: Document) -> ExpansionFailed:
    """Drain the document's errors into a single exception."""
    errors = list(doc.errors)
    doc.errors.clear()
    return ExpansionFailed(errors)


def expand_value(value: Value, doc: Document) -> str:
    """Expand a single value to text."""
    if isinstance(value, Text):
        return value.value

    if isinstance(value, Number):
        return format_number(value.value)

    if isinstance(value, Call):
        return _expand_call(value, doc)

    if isinstance(value, Use):
        from writ.modules import import_module

        import_module(value, doc)
        return ""

    if isinstance(value, Def):
        doc.define(value)
        return ""

    if isinstance(value, Variable):
        return _expand_variable(value, doc)

    raise doc.error(f"unknown value of type {type(value).__name__}")


def expand_values(values: Iterable[Value], doc: Document) -> str:
    return "".join([expand_value(value, doc) for value in values])


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


def _expand_call(call: Call, doc: Document) -> str:
    if call.name in doc.defines:
        return _expand_macro(call, doc.defines[call.name], doc)

    if call.name in doc.variables:
        if call.args:
            raise doc.error(
                f"variable '{call.name}' cannot be given arguments",
                f"write #{call.name} or ({call.name}) to use its value",
            )
        return expand_values(doc.variables[call.name].value or (), doc)

    raise doc.error(
        f"no macro or variable '{call.name}' was defined",
        f"define it first with #def {call.name} ... #end or #let {call.name} ...",
    )


def _expand_macro(call: Call, defn: Def, doc: Document) -> str:
    """Expand the body, then replace each $param with its trimmed argument.

    The body is expanded before substitution, so placeholder text produced
    by nested calls in the body is replaced as well.
    """
    if len(call.args) != len(defn.args):
        usage = " | ".join(f"${name}" for name in defn.args)
        raise doc.error(
            f"macro '{call.name}' expects {len(defn.args)} argument(s) "
            f"but was given {len(call.args)}",
            f"usage: ({call.name} {usage})" if usage else f"usage: ({call.name})",
        )

    doc.call_stack.append(call.name)
    try:
        text = expand_values(defn.body, doc)
        for param, group in zip(defn.args, call.args):
            argument = strip_ascii(expand_values(group.values, doc))
            text = substitute(text, param, argument)
    finally:
        doc.call_stack.pop()
    return text


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------


def _expand_variable(var: Variable, doc: Document) -> str:
    # A bare #name reads the variable (or calls a zero-argument macro)
    if var.value is None:
        return _expand_call(Call(var.name, (), var.span), doc)

    if var.is_set:
        entry = doc.variables.get(var.name)
        if entry is None:
            raise doc.error(
                f"variable '{var.name}' was never given a value",
                f"use #let {var.name} ... before changing it with #set",
            )
        doc.variables[var.name] = replace(entry, value=var.value)
    else:
        doc.variables[var.name] = var
    return ""
