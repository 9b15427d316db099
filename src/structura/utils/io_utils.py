"""
Centralized file I/O utilities.

- Single place for encoding and extension handling
- Use Path.read_text() consistently (no raw open/read)
"""

from pathlib import Path
from typing import Union

from .config import DEFAULT_FILE_ENCODING, SOURCE_FILE_EXTENSION


def read_source_file(path: Union[Path, str]) -> str:
    """Read source file with standard encoding."""
    p = Path(path) if not isinstance(path, Path) else path
    return p.read_text(encoding=DEFAULT_FILE_ENCODING)


def write_output_file(path: Union[Path, str], text: str) -> Path:
    """Write emitted code, creating the parent directory if needed."""
    p = Path(path) if not isinstance(path, Path) else path
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding=DEFAULT_FILE_ENCODING)
    return p


def is_source_path(path: Union[Path, str]) -> bool:
    """True if path carries the `.struct` extension."""
    return Path(path).suffix == SOURCE_FILE_EXTENSION
