"""
Base Pass System

Per-compilation context plus the IR pass interface and a dependency-ordered
pass manager.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type

from ..ir.nodes import ProgramIR
from ..shared.builtins import FunctionSignature
from ..shared.errors import ErrorReporter, StructuraImplementationError
from ..shared.types import Type as StructuraType

logger = logging.getLogger("structura.passes.base")


class CompilationContext:
    """
    All mutable state of one compilation.

    Alias and user-signature tables are built from scratch for every
    compilation; the builtin registry is the only table shared between
    compilations and lives in shared.builtins.
    """

    def __init__(self, source_files: Optional[Dict[str, str]] = None):
        self.source_files: Dict[str, str] = dict(source_files or {})
        self.reporter: ErrorReporter = ErrorReporter(self.source_files)

        # name -> definition, filled by the type checker's collection phase
        self.alias_table: Dict[str, StructuraType] = {}
        # name -> signature of the winning user declaration
        self.user_signatures: Dict[str, FunctionSignature] = {}

        self._analysis_results: Dict[Type['BasePass'], Any] = {}

    def get_analysis(self, pass_class: Type['BasePass']) -> Any:
        """Get analysis results from a pass"""
        if pass_class not in self._analysis_results:
            raise StructuraImplementationError(f"Analysis {pass_class.__name__} not available")
        return self._analysis_results[pass_class]

    def set_analysis(self, pass_class: Type['BasePass'], results: Any) -> None:
        self._analysis_results[pass_class] = results


class BasePass(ABC):
    """
    Base class for IR passes.

    Passes return new IR rather than mutating their input, and store any
    analysis they compute on the context.
    """
    requires: List[Type['BasePass']] = []

    @abstractmethod
    def run(self, ir: ProgramIR, ctx: CompilationContext) -> ProgramIR:
        raise NotImplementedError


PassHook = Callable[[Type[BasePass], ProgramIR], None]


class PassManager:
    """
    Runs registered passes in dependency order.
    """

    def __init__(self):
        self.passes: List[Type[BasePass]] = []
        self._dependency_graph: Dict[Type[BasePass], set] = {}

    def register_pass(self, pass_class: Type[BasePass]) -> None:
        self.passes.append(pass_class)
        self._dependency_graph[pass_class] = set(pass_class.requires)

    def run_all(self, ir: ProgramIR, ctx: CompilationContext,
                after_pass: Optional[PassHook] = None) -> ProgramIR:
        """
        Run all passes in dependency order.

        `after_pass` is called with the pass class and its output IR, which
        is how the driver writes per-pass dumps.
        """
        for pass_class in self._topological_sort():
            logger.debug(f"Running {pass_class.__name__}")
            ir = pass_class().run(ir, ctx)
            if after_pass is not None:
                after_pass(pass_class, ir)
        return ir

    def _topological_sort(self) -> List[Type[BasePass]]:
        """Topological sort of passes by dependencies, registration order among peers."""
        in_degree = {p: len(self._dependency_graph[p] & set(self.passes)) for p in self.passes}
        queue = [p for p in self.passes if in_degree[p] == 0]
        result = []

        while queue:
            pass_class = queue.pop(0)
            result.append(pass_class)

            for other_pass in self.passes:
                if pass_class in self._dependency_graph[other_pass]:
                    in_degree[other_pass] -= 1
                    if in_degree[other_pass] == 0:
                        queue.append(other_pass)

        if len(result) != len(self.passes):
            raise StructuraImplementationError("Circular dependency detected in passes")

        return result
