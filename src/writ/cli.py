"""Command-line interface for writ."""

from __future__ import annotations

import argparse
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from writ.errors import ExpansionFailed, LexError, ParseError

CONFIG_NAME = "writ.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    variables: dict[str, str]
    modules: list[str]
    module_paths: list[Path]
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    from writ import __version__

    p = argparse.ArgumentParser(
        prog="writ",
        description=f"writ {__version__} markup expander",
        add_help=False,
    )
    p.add_argument("input", nargs="?", help="Input .write file")
    p.add_argument(
        "-h", "-help", "--help", dest="help", action="store_true", help="Show this help and exit"
    )
    p.add_argument(
        "-v", "-version", "--version", dest="version", action="store_true", help="Show version and exit"
    )
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Predefine a variable (repeatable)",
    )
    p.add_argument(
        "-I",
        "--module-path",
        action="append",
        default=[],
        metavar="DIR",
        help="Extra directory searched for .write modules (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and re-expand")
    p.add_argument("--debug", action="store_true", help="Dump tokens and tree to stderr")
    return p


def parse_define_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE string into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid define format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    return name, value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Variables: config < CLI
    variables: dict[str, str] = {}
    cfg_vars = config.get("variables")
    if isinstance(cfg_vars, dict):
        for k, v in cfg_vars.items():
            variables[str(k)] = str(v)
    for raw in args.define:
        name, value = parse_define_arg(raw)
        variables[name] = value

    # Modules imported before the document, and where to find them
    modules: list[str] = []
    module_paths: list[Path] = []
    cfg_modules = config.get("modules")
    if isinstance(cfg_modules, dict):
        cfg_use = cfg_modules.get("use")
        if isinstance(cfg_use, list):
            modules.extend(str(m) for m in cfg_use)
        cfg_paths = cfg_modules.get("paths")
        if isinstance(cfg_paths, list):
            module_paths.extend(Path(p) for p in cfg_paths)
    module_paths.extend(Path(p) for p in args.module_path)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        variables=variables,
        modules=modules,
        module_paths=module_paths,
        watch=args.watch,
        debug=args.debug,
    )


def compile_file(options: CliOptions) -> str:
    """Read, lex, parse and expand a writ file; returns the output text.

    The result is stripped of surrounding whitespace and ends in one newline.
    """
    from writ.ast import Use
    from writ.builtins import INTERNAL_MODULES
    from writ.debug import dump_ast, dump_tokens
    from writ.document import BUILTIN_SPAN, new_document
    from writ.expand import expand
    from writ.lexer import tokenize
    from writ.parser import Parser
    from writ.strings import strip_ascii

    filename = str(options.input_file)
    source = options.input_file.read_text(encoding="utf-8")

    tokens = tokenize(source, filename)
    if options.debug:
        dump_tokens(tokens)
    values = Parser(tokens, source, filename).parse()
    if options.debug:
        dump_ast(values)

    doc = new_document(
        filename,
        source,
        variables=options.variables,
        module_paths=options.module_paths,
    )
    prelude = [Use(name, name in INTERNAL_MODULES, BUILTIN_SPAN) for name in options.modules]
    text = expand([*prelude, *values], doc)
    return strip_ascii(text) + "\n"


def _emit(options: CliOptions, text: str) -> None:
    if options.output_file:
        options.output_file.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, re-expand on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    _emit(options, compile_file(options))
                    print(f"Expanded {options.input_file}", file=sys.stderr)
                except (LexError, ParseError, ExpansionFailed) as exc:
                    print(exc.format(str(options.input_file)), file=sys.stderr)
                except OSError as exc:
                    print(f"error: {exc}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1). Does not call sys.exit()."""
    from writ import __version__

    parser = build_parser()
    args = parser.parse_args(argv)

    # help and version exit with status 1
    if args.help:
        parser.print_help()
        return 1
    if args.version:
        print(f"writ {__version__}")
        return 1
    if args.input is None:
        print("error: missing input file", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if options.watch:
        watch_loop(options)
        return 0

    try:
        text = compile_file(options)
    except OSError as exc:
        print(f"error: could not read {options.input_file}: {exc.strerror}", file=sys.stderr)
        return 1
    except (LexError, ParseError, ExpansionFailed) as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1

    try:
        _emit(options, text)
    except OSError as exc:
        print(f"error: could not write {options.output_file}: {exc.strerror}", file=sys.stderr)
        return 1
    return 0
