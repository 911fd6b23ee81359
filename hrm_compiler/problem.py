"""
Problem: the static test harness a Program is validated and scored against.

  ios                — one or more ProblemIO cases (input tape, expected output)
  memory             — floor template, tuple of Optional[Value], fixed length
  available_commands — keywords the program may use

Problems are built through ProblemBuilder (directly, or from JSON via
problem_definition.py) and never change afterwards.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .commands import ALL_COMMANDS
from .errors import ProblemError
from .value import Value

__all__ = ['Problem', 'ProblemIO', 'ProblemBuilder']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProblemIO:
    """One IO case: values fed to INBOX, values OUTBOX must produce."""
    input: Tuple[Value, ...] = ()
    output: Tuple[Value, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'input', tuple(self.input))
        object.__setattr__(self, 'output', tuple(self.output))


@dataclass(frozen=True)
class Problem:
    ios: Tuple[ProblemIO, ...]
    memory: Tuple[Optional[Value], ...] = ()
    available_commands: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, 'ios', tuple(self.ios))
        object.__setattr__(self, 'memory', tuple(self.memory))
        object.__setattr__(self, 'available_commands', frozenset(self.available_commands))

    def is_command_available(self, keyword: str) -> bool:
        return keyword in self.available_commands


class ProblemBuilder:
    """Fluent Problem construction.

    Every setter returns the builder, so a problem reads as one chain:

        problem = (ProblemBuilder()
                   .add_io(ProblemIO([Int(1)], [Int(1)]))
                   .memory_dim(2)
                   .add_memory_slot(0, Int(0))
                   .enable_command('INBOX')
                   .enable_command('OUTBOX')
                   .build())
    """

    def __init__(self):
        self._ios: List[ProblemIO] = []
        self._memory: Dict[int, Value] = {}
        self._memory_dim = 0
        self._commands: Set[str] = set()

    def add_io(self, problem_io: ProblemIO) -> ProblemBuilder:
        self._ios.append(problem_io)
        return self

    def add_ios(self, problem_ios: Iterable[ProblemIO]) -> ProblemBuilder:
        for problem_io in problem_ios:
            self.add_io(problem_io)
        return self

    def memory_dim(self, dim: int) -> ProblemBuilder:
        if dim < 0:
            raise ProblemError(f"memory dimension must not be negative: {dim}")
        self._memory_dim = dim
        return self

    def add_memory_slot(self, slot: int, value: Value) -> ProblemBuilder:
        """Seed cell ``slot``; a later call for the same slot overwrites it."""
        self._memory[slot] = value
        return self

    def enable_all_commands(self) -> ProblemBuilder:
        self._commands = set(ALL_COMMANDS)
        return self

    def enable_command(self, keyword: str) -> ProblemBuilder:
        if keyword not in ALL_COMMANDS:
            logger.warning("Ignoring unknown command %r", keyword)
            return self
        self._commands.add(keyword)
        return self

    def disable_command(self, keyword: str) -> ProblemBuilder:
        self._commands.discard(keyword)
        return self

    def build(self) -> Problem:
        if not self._ios:
            raise ProblemError("problem has no IO cases")

        memory: List[Optional[Value]] = [None] * self._memory_dim
        for slot, value in sorted(self._memory.items()):
            if not 0 <= slot < self._memory_dim:
                raise ProblemError(
                    f"memory slot {slot} outside 0..{self._memory_dim}")
            memory[slot] = value

        return Problem(ios=self._ios, memory=memory,
                       available_commands=self._commands)
