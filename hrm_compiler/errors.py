"""
Exception hierarchy for the HRM toolchain.

Three tiers, raised at three different times:

    CompileError     source text -> Program         (compiler.py)
    ValidationError  Program vs. Problem, static     (Program.validate)
    RunError         Program vs. Problem, dynamic    (Program.run)

Problem construction errors (bad JSON shapes, seeded cells out of range)
raise ProblemError, which is also a ValueError.
"""

from __future__ import annotations
from typing import Optional

__all__ = [
    'HrmError',
    'CompileError', 'IllegalLine',
    'ValidationError', 'CommandNotAvailable', 'CommandIndex', 'MissingLabel', 'LabelIndex',
    'RunError', 'EmptyAccumulator', 'EmptyMemory', 'IndexOutOfRange', 'CharUsedAsIndex',
    'IncompatibleTypes', 'IncorrectOutput', 'UnknownLabel', 'StepLimitExceeded',
    'ProblemError',
]


class HrmError(Exception):
    """Base class for every error raised by hrm_compiler."""


# ──────────────────────────────────────────────
# Compile time
# ──────────────────────────────────────────────

class CompileError(HrmError):
    """Raised when source text cannot be turned into a Program."""


class IllegalLine(CompileError):
    """A line matched none of the recognised shapes."""
    def __init__(self, line: str, line_num: int = 0):
        self.line = line
        self.line_num = line_num
        message = f"illegal line: {line!r}"
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


# ──────────────────────────────────────────────
# Validation (static)
# ──────────────────────────────────────────────

class ValidationError(HrmError):
    """Raised by Program.validate for static structural defects."""


class CommandNotAvailable(ValidationError):
    def __init__(self, keyword: str):
        self.keyword = keyword
        super().__init__(f"command not available in this problem: {keyword}")


class CommandIndex(ValidationError):
    def __init__(self, index: int, memory_size: Optional[int] = None):
        self.index = index
        self.memory_size = memory_size
        suffix = f" (memory size {memory_size})" if memory_size is not None else ""
        super().__init__(f"memory index out of range: {index}{suffix}")


class MissingLabel(ValidationError):
    def __init__(self, label: str):
        self.label = label
        super().__init__(f"jump to undeclared label: {label!r}")


class LabelIndex(ValidationError):
    def __init__(self, label: str, index: int):
        self.label = label
        self.index = index
        super().__init__(f"label {label!r} points past the end of the program: {index}")


# ──────────────────────────────────────────────
# Run time (dynamic)
# ──────────────────────────────────────────────

class RunError(HrmError):
    """Raised by Program.run; aborts the whole run."""


class EmptyAccumulator(RunError):
    def __init__(self):
        super().__init__("accumulator is empty")


class EmptyMemory(RunError):
    def __init__(self, index: Optional[int] = None):
        self.index = index
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"memory cell is empty{where}")


class IndexOutOfRange(RunError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"index out of range: {value!r}")


class CharUsedAsIndex(RunError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"character used as index: {value!r}")


class IncompatibleTypes(RunError):
    def __init__(self, lhs, rhs, op: str):
        self.lhs = lhs
        self.rhs = rhs
        self.op = op
        super().__init__(f"incompatible types: {lhs!r} {op} {rhs!r}")


class IncorrectOutput(RunError):
    """``expected`` is None when the output tape is already exhausted;
    ``actual`` is None when the program stopped before producing ``expected``."""
    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(f"incorrect output: expected {expected!r}, got {actual!r}")


class UnknownLabel(RunError):
    """Jump to a label that is not in the label table (program was not validated)."""
    def __init__(self, label: str):
        self.label = label
        super().__init__(f"unknown label at run time: {label!r}")


class StepLimitExceeded(RunError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"step limit exceeded: {limit}")


# ──────────────────────────────────────────────
# Problem construction
# ──────────────────────────────────────────────

class ProblemError(HrmError, ValueError):
    """Raised when a Problem cannot be built from the given parts."""
