"""
Source Location (Span)

Line/column position of a token or node inside a `.struct` source file.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Source location of a token or node.

    - File, 1-based line and column
    - Optional end position for multi-character spans
    - Immutable (frozen) for hashability; nodes exclude it from equality
    """
    file: str
    line: int
    column: int = 1
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"
