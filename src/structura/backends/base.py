"""
Backend Interface
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..ir.nodes import ProgramIR


class Backend(ABC):
    """
    Code generation target.

    A backend trusts its IR: it runs after type checking and optimization and
    never re-validates the program.
    """

    name: str = "backend"
    file_extension: str = ""

    @abstractmethod
    def codegen(self, program: ProgramIR, called_builtins: Optional[Sequence[str]] = None) -> str:
        """
        Generate target source text from optimized IR.

        `called_builtins` is the builtin usage analysis for `program`; a
        backend computes it itself when it is not supplied.
        """
        raise NotImplementedError
