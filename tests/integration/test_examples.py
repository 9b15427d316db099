#!/usr/bin/env python3
"""
Every program under examples/ compiles.
"""

import pytest
from structura.utils.io_utils import read_source_file
from tests.test_utils import compile_js

EXAMPLE_NAMES = ["basics", "math", "strings"]


@pytest.mark.integration
class TestExamples:
    @pytest.mark.parametrize("name", EXAMPLE_NAMES)
    def test_example_compiles(self, compiler, examples_dir, name):
        source = read_source_file(examples_dir / f"{name}.struct")
        output = compile_js(source, compiler)
        assert output.startswith("(function() {\n")
        assert output.endswith("})();\n")

    def test_basics_output(self, compiler, examples_dir):
        output = compile_js(read_source_file(examples_dir / "basics.struct"), compiler)
        assert "// Type alias: Label = string|number[]" in output
        assert "function print(value, ...rest) {" in output
        assert "return 42;" in output
        assert 'print(greeting("Structura"));' in output

    def test_math_synthesizes_undeclared_builtins(self, compiler, examples_dir):
        output = compile_js(read_source_file(examples_dir / "math.struct"), compiler)
        assert "function sumNumbers(arg0)" in output
        assert "function max(arg0, arg1)" in output
        assert "return (a + b) / 2;" in output
        assert "print(max(1 + 2, 3 * 4));" in output

    def test_strings_output(self, compiler, examples_dir):
        output = compile_js(read_source_file(examples_dir / "strings.struct"), compiler)
        assert "function capitalize(s)" in output
        assert 'isURL("https://example.com/docs");' in output
