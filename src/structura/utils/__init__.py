"""
Structura utilities package
"""

from .io_utils import read_source_file, write_output_file, is_source_path

__all__ = ["read_source_file", "write_output_file", "is_source_path"]
