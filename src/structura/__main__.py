"""CLI entry point: run `structura file.struct` or `python -m structura file.struct`."""

import logging
import sys
from pathlib import Path
from typing import List, Optional


MODES = ("tokens", "ast", "ir", "tac", "js")
_STOP_AFTER = {"tokens": "lex", "ast": "parse", "ir": "optimize", "tac": "optimize", "js": None}


def default_output_path(source: Path) -> Path:
    from .utils.config import BUILD_DIR_NAME, OUTPUT_FILE_EXTENSION
    return source.parent / BUILD_DIR_NAME / (source.stem + OUTPUT_FILE_EXTENSION)


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .backends.javascript import JavaScriptBackend
    from .compiler.driver import CompilerDriver
    from .ir.serialization import serialize_ir
    from .ir.tac import generate_tac
    from .utils.config import RUNTIME_MODULE_PATH, SOURCE_FILE_EXTENSION
    from .utils.io_utils import is_source_path, read_source_file, write_output_file

    parser = argparse.ArgumentParser(prog="structura", description="Compile a Structura (.struct) file to JavaScript.")
    parser.add_argument("file", type=Path, help=f"Path to {SOURCE_FILE_EXTENSION} source file")
    parser.add_argument("-m", "--mode", choices=MODES, default="js",
                        help="What to print or write (default: js)")
    parser.add_argument("-o", "--output", help="Output path for js mode, '-' for stdout "
                                               "(default: build/<name>.js next to the source)")
    parser.add_argument("--no-wrap", action="store_true", help="Do not wrap emitted code in an IIFE")
    parser.add_argument("--runtime-module", default=RUNTIME_MODULE_PATH,
                        help=f"Module path the emitted code requires (default: {RUNTIME_MODULE_PATH})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = args.file
    if not is_source_path(path):
        sys.stderr.write(f"structura: error: input file must have a {SOURCE_FILE_EXTENSION} extension\n")
        return 1
    if not path.is_file():
        sys.stderr.write(f"structura: error: file not found: {path}\n")
        return 1

    try:
        source = read_source_file(path)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"structura: error: could not read file: {e}\n")
        return 1

    backend = JavaScriptBackend(runtime_module=args.runtime_module, wrap=not args.no_wrap)
    result = CompilerDriver(backend).compile(source, str(path), stop_after=_STOP_AFTER[args.mode])

    if not result.success:
        sys.stderr.write(result.format_errors() + "\n")
        return 1

    if args.mode == "tokens":
        for token in result.tokens:
            print(repr(token))
    elif args.mode == "ast":
        for statement in result.ast.statements:
            print(statement)
    elif args.mode == "ir":
        print(serialize_ir(result.ir))
    elif args.mode == "tac":
        print("Three-Address Code (TAC):")
        print(generate_tac(result.ir))
    elif args.output == "-":
        sys.stdout.write(result.output)
    else:
        out_path = Path(args.output) if args.output else default_output_path(path)
        try:
            write_output_file(out_path, result.output)
        except OSError as e:
            sys.stderr.write(f"structura: error: could not write {out_path}: {e}\n")
            return 1
        print(f"Compilation successful! Output written to {out_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
