"""
Configuration constants shared across the Structura compiler
"""

# Source files
SOURCE_FILE_EXTENSION = ".struct"
DEFAULT_SOURCE_FILE = "main.struct"
DEFAULT_FILE_ENCODING = "utf-8"

# Emitted JavaScript
RUNTIME_MODULE_PATH = "./runtime/stdlib"  # Required by every emitted program
RUNTIME_BINDING_NAME = "stdlib"
OUTPUT_FILE_EXTENSION = ".js"
BUILD_DIR_NAME = "build"
EMIT_INDENT = "  "

# Diagnostics
NO_COLOR_ENV_VAR = "NO_COLOR"
COLOR_ENV_VAR = "STRUCTURA_COLOR"

# Debug dumps (S-expression IR written per stage by the driver)
DUMP_IR_ENV_VAR = "STRUCTURA_DUMP_IR"
IR_DUMP_DIR = "ir_dump"
