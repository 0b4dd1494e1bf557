# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Text-program interpreter for the JavaKara, PythonKara, JavaScriptKara and RubyKara dialects."""

from __future__ import annotations

from karasim.interpreter.dialects import Dialect, default_template, dialect_for_filename
from karasim.interpreter.runtime import (
    ExtractionResult,
    NextCommand,
    StreamingInterpreter,
    compile_program,
    create_streaming_interpreter,
    extract_commands,
    validate_source,
)

__all__ = [
    "Dialect",
    "ExtractionResult",
    "NextCommand",
    "StreamingInterpreter",
    "compile_program",
    "create_streaming_interpreter",
    "default_template",
    "dialect_for_filename",
    "extract_commands",
    "validate_source",
]
