"""
Error Reporting

Diagnostics for Structura compilations, rendered in rustc style, plus the
closed exception taxonomy raised by each compiler stage.
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional, List, Dict
from .source_location import SourceLocation
from ..utils.config import COLOR_ENV_VAR, NO_COLOR_ENV_VAR


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get(NO_COLOR_ENV_VAR):
        return False
    explicit = os.environ.get(COLOR_ENV_VAR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return True

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Error dataclass
# ---------------------------------------------------------------------------

@dataclass
class Error:
    """A single rendered-on-demand compiler diagnostic."""
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def _format_diagnostic(
    error: Error,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """
    Render a single diagnostic in rustc style.

    Example output (plain, no color)::

        error[E0308]: argument 1 of 'abs' has type 'string', expected 'number'
         --> main.struct:2:11
          |
        2 | print(abs("x")): number;
          |           ^^^ expected `number`
          |
          = help: ...
    """
    out: List[str] = []

    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    )

    if error.location is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    loc = error.location

    source = source_files.get(loc.file)
    if source is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + str(loc))
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    src_lines = source.split("\n")
    gw = max(len(str(loc.line)), 1)

    out.append(_style(" " * gw + "--> ", _BOLD, _BLUE, color=color) + str(loc))
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))

    idx = loc.line - 1
    code_line = src_lines[idx] if 0 <= idx < len(src_lines) else ""
    out.append(_style(str(loc.line).rjust(gw) + " | ", _BOLD, _BLUE, color=color) + code_line)

    col_start = max(loc.column, 1) - 1
    if loc.end_column > loc.column and loc.end_line in (0, loc.line):
        span_len = loc.end_column - loc.column
    else:
        span_len = _guess_span(code_line, col_start)
    carets = " " * col_start + "^" * max(1, span_len)
    label_suffix = f" {error.label}" if error.label else ""
    out.append(
        _style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=color)
        + _style(carets + label_suffix, _BOLD, _RED, color=color)
    )

    _append_annotations(out, error, gw, color)
    return "\n".join(out)


def _guess_span(code_line: str, col_start: int) -> int:
    """Guess token length when end_column is unavailable."""
    if col_start >= len(code_line):
        return 1
    length = 0
    for ch in code_line[col_start:]:
        if ch in (" ", "\t", ";", ",", "(", ")", "]", "}"):
            break
        length += 1
    return max(1, length)


def _append_annotations(
    out: List[str],
    error: Error,
    gw: int,
    color: bool,
) -> None:
    if not (error.help or error.note):
        return
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))
    pad = " " * (gw + 1)
    if error.help:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("help: ", _BOLD, color=color)
            + error.help
        )
    if error.note:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("note: ", _BOLD, color=color)
            + error.note
        )


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """Collects diagnostics for one compilation and renders them."""

    def __init__(self, source_files: Dict[str, str]):
        self.source_files = source_files
        self.errors: List[Error] = []

    def report_error(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        note: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(
            message=message,
            location=location,
            code=code,
            help=help,
            note=note,
            label=label,
        ))

    def report_exception(self, exc: "StructuraError") -> None:
        """Record a stage failure raised as a StructuraError."""
        self.report_error(
            exc.message,
            exc.location,
            code=exc.error_code,
            help=exc.help_text,
            label=exc.label_text,
        )

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(error, self.source_files, color=use_color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        parts = [self.format_error(e, color=color) for e in self.errors]
        use_color = color if color is not None else _use_color()
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(
            _style("error", _BOLD, _RED, color=use_color)
            + _style(f": {summary}", _BOLD, color=use_color)
        )
        return "\n\n".join(parts)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def print_errors(self) -> None:
        print(self.format_all_errors(), file=sys.stderr)


# ============================================================================
# Exception Classes
# ============================================================================

class StructuraError(Exception):
    """
    Base exception for every error in Structura source code.

    Each stage raises exactly one of the subclasses below; the first one
    raised aborts the compilation.
    """
    error_code = "E0001"

    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 help: Optional[str] = None,
                 label: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location
        self.help_text = help
        self.label_text = label

    @property
    def line(self) -> Optional[int]:
        return self.location.line if self.location else None

    def __str__(self):
        if self.location:
            return f"error[{self.error_code}]: {self.message}\n --> {self.location}"
        return f"error[{self.error_code}]: {self.message}"


class LexError(StructuraError):
    """No token rule matches at `position`."""
    error_code = "E0001"

    def __init__(self, position: int, char: str, location: SourceLocation):
        super().__init__(
            f"unexpected character {char!r} at position {position}",
            location,
            label="no token starts here",
        )
        self.position = position
        self.char = char


class ParseError(StructuraError):
    """Unexpected token; parsing stops at the first one."""
    error_code = "E0002"

    def __init__(self, expected: str, found: str, location: Optional[SourceLocation] = None):
        super().__init__(f"expected {expected}, found {found}", location, label=f"expected {expected}")
        self.expected = expected
        self.found = found


class TypeCheckError(StructuraError):
    """Base of the type checker's error kinds."""
    error_code = "E0308"


class UnknownAlias(TypeCheckError):
    error_code = "E0412"

    def __init__(self, name: str, location: Optional[SourceLocation] = None, message: Optional[str] = None):
        super().__init__(message or f"cannot find type alias '{name}'", location,
                         help="declare it with `Name = type;`")
        self.name = name


class CyclicAlias(UnknownAlias):
    """Alias chain that leads back to itself."""
    error_code = "E0391"

    def __init__(self, chain: List[str], location: Optional[SourceLocation] = None):
        super().__init__(chain[0], location,
                         message=f"cyclic type alias: {' -> '.join(chain)}")
        self.chain = chain


class ArityMismatch(TypeCheckError):
    error_code = "E0061"

    def __init__(self, name: str, expected: int, found: int, location: Optional[SourceLocation] = None):
        super().__init__(
            f"function '{name}' expects {expected} argument{'s' if expected != 1 else ''} but got {found}",
            location,
        )
        self.name = name
        self.expected = expected
        self.found = found


class TypeMismatch(TypeCheckError):
    error_code = "E0308"

    def __init__(self, message: str, location: Optional[SourceLocation] = None,
                 expected: Optional[str] = None, found: Optional[str] = None):
        super().__init__(message, location, label=f"expected `{expected}`" if expected else None)
        self.expected = expected
        self.found = found


class UndeclaredFunction(TypeCheckError):
    error_code = "E0425"

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        super().__init__(f"cannot find function '{name}'", location, label="not declared")
        self.name = name


class ReservedNameViolation(TypeCheckError):
    error_code = "E0428"

    def __init__(self, name: str, location: Optional[SourceLocation] = None, reason: Optional[str] = None):
        super().__init__(
            f"cannot redefine built-in function '{name}'" + (f": {reason}" if reason else ""),
            location,
            help="built-in functions may only be forward-declared without a body",
        )
        self.name = name


class MissingReturnStatement(TypeCheckError):
    error_code = "E0069"

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        super().__init__(f"function '{name}' has no return statement", location)
        self.name = name


class InvalidLiteralArgument(TypeCheckError):
    error_code = "E0080"

    def __init__(self, name: str, value: str, location: Optional[SourceLocation] = None):
        super().__init__(f"literal argument {value!r} is not valid for '{name}'", location)
        self.name = name
        self.value = value


class IRGenerationError(StructuraError):
    error_code = "E0700"


class UnsupportedNode(IRGenerationError):
    def __init__(self, kind: str, location: Optional[SourceLocation] = None):
        super().__init__(f"no IR lowering for node kind '{kind}'", location)
        self.kind = kind


class StructuraImplementationError(Exception):
    """
    Error in the compiler itself, never in user source.
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
