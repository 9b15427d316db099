"""
Compiler Driver

Runs the pipeline Lexer → Parser → TypeChecker → IR lowering → IR passes
(constant folding, builtin usage) → backend, strictly in that order. The
first StructuraError raised by any stage aborts the compilation and is
recorded on the context's ErrorReporter.
"""

import itertools
import logging
import os
from pathlib import Path
from typing import List, Optional, Type

from ..backends.base import Backend
from ..backends.javascript import JavaScriptBackend
from ..frontend.lexer import Lexer, Token
from ..frontend.parser import Parser
from ..ir.nodes import ProgramIR
from ..ir.serialization import serialize_ir
from ..passes.ast_to_ir import ASTToIRLowerer
from ..passes.base import BasePass, CompilationContext, PassManager
from ..passes.builtin_usage import BuiltinUsagePass
from ..passes.const_folding import IROptimizer
from ..passes.type_checker import TypeChecker
from ..shared.errors import StructuraError
from ..shared.nodes import Program
from ..utils.config import DEFAULT_FILE_ENCODING, DEFAULT_SOURCE_FILE, DUMP_IR_ENV_VAR, IR_DUMP_DIR

logger = logging.getLogger("structura.compiler.driver")

# Stage names accepted by CompilerDriver.compile(stop_after=...)
STAGES = ("lex", "parse", "check", "lower", "optimize", "emit")


class CompilationResult:
    """Compilation result"""

    def __init__(
        self,
        context: CompilationContext,
        success: bool = False,
        output: Optional[str] = None,
        tokens: Optional[List[Token]] = None,
        ast: Optional[Program] = None,
        ir: Optional[ProgramIR] = None,
        error: Optional[StructuraError] = None,
    ):
        self.context = context
        self.success = success
        self.output = output
        self.tokens = tokens
        self.ast = ast
        self.ir = ir
        self.error = error

    def has_errors(self) -> bool:
        return self.context.reporter.has_errors()

    def format_errors(self, color: Optional[bool] = None) -> str:
        return self.context.reporter.format_all_errors(color=color)


class CompilerDriver:
    """
    Orchestrates one compilation per compile() call.

    The driver itself holds no per-compilation state, so one instance can
    serve any number of compilations.
    """

    def __init__(self, backend: Optional[Backend] = None):
        self.backend = backend if backend is not None else JavaScriptBackend()
        self.parser = Parser()
        self.pass_manager = PassManager()
        self._register_passes()

    def _register_passes(self) -> None:
        """IR passes, after lowering: optimization first, then usage analysis for the emitter."""
        self.pass_manager.register_pass(IROptimizer)
        self.pass_manager.register_pass(BuiltinUsagePass)

    def compile(
        self,
        source: str,
        source_file: str = DEFAULT_SOURCE_FILE,
        stop_after: Optional[str] = None,
    ) -> CompilationResult:
        """
        Compile `source`; never raises for errors in the program itself.

        stop_after: one of STAGES; later stages are skipped and the result
        carries whatever was produced so far.
        """
        if stop_after is not None and stop_after not in STAGES:
            raise ValueError(f"unknown stage {stop_after!r}; expected one of {', '.join(STAGES)}")

        ctx = CompilationContext({source_file: source})
        result = CompilationResult(ctx)
        dump_dir = self._dump_dir()

        try:
            result.tokens = Lexer(source_file).tokenize(source)
            if stop_after == "lex":
                return self._succeed(result)

            result.ast = self.parser.parse(result.tokens, source_file)
            if stop_after == "parse":
                return self._succeed(result)

            TypeChecker(ctx).check(result.ast)
            if stop_after == "check":
                return self._succeed(result)

            result.ir = ASTToIRLowerer().lower_program(result.ast)
            self._dump(dump_dir, "00_after_ast_to_ir", result.ir)
            if stop_after == "lower":
                return self._succeed(result)

            pass_index = itertools.count(1)

            def after_pass(pass_class: Type[BasePass], ir: ProgramIR) -> None:
                self._dump(dump_dir, f"{next(pass_index):02d}_after_{pass_class.__name__}", ir)

            result.ir = self.pass_manager.run_all(result.ir, ctx, after_pass=after_pass)
            if stop_after == "optimize":
                return self._succeed(result)

            called = ctx.get_analysis(BuiltinUsagePass)
            result.output = self.backend.codegen(result.ir, called)
            return self._succeed(result)

        except StructuraError as e:
            logger.debug(f"Compilation of {source_file} failed: {type(e).__name__}: {e.message}")
            ctx.reporter.report_exception(e)
            result.error = e
            result.success = False
            return result

    @staticmethod
    def _succeed(result: CompilationResult) -> CompilationResult:
        result.success = True
        return result

    @staticmethod
    def _dump_dir() -> Optional[Path]:
        if os.environ.get(DUMP_IR_ENV_VAR):
            return Path(IR_DUMP_DIR)
        return None

    @staticmethod
    def _dump(dump_dir: Optional[Path], name: str, ir: ProgramIR) -> None:
        if dump_dir is None:
            return
        try:
            dump_dir.mkdir(parents=True, exist_ok=True)
            (dump_dir / f"{name}.sexpr").write_text(serialize_ir(ir), encoding=DEFAULT_FILE_ENCODING)
        except OSError as e:
            logger.warning(f"Could not write IR dump {name}: {e}")


def compile_source(source: str, source_file: str = DEFAULT_SOURCE_FILE,
                   backend: Optional[Backend] = None) -> str:
    """
    Compile `source` to target code.

    Raises the first StructuraError of the failing stage.
    """
    result = CompilerDriver(backend).compile(source, source_file)
    if not result.success:
        raise result.error
    return result.output
