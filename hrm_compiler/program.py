"""
Compiled HRM program: instruction sequence + label table.

Lifecycle:
  1. ProgramBuilder collects instructions and labels (compiler.py drives it).
  2. Program.validate(problem) rejects static defects: unavailable
     instructions, memory operands past the floor, undeclared labels,
     labels pointing past the end.
  3. Program.run(problem) executes every IO case against a fresh copy of
     the problem's memory and returns a Score.

Execution model (per IO case):
  1. Fetch instruction at pc (End sentinel once pc == len(program))
  2. Count the step
  3. Execute (mutates GameState, never pc)
  4. Ask the instruction for the next pc
  5. Stop on End (no adjustment) or on an INBOX that found no input
     (that INBOX does not count: one step is taken back)
  6. Every expected output must have been produced, else IncorrectOutput

A Program is never mutated by validate or run.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .commands import Command, End
from .errors import (
    CommandNotAvailable, CommandIndex, MissingLabel, LabelIndex,
    IncorrectOutput, UnknownLabel, StepLimitExceeded,
)
from .game_state import GameState, StopReason

__all__ = ['Program', 'ProgramBuilder', 'Score']

logger = logging.getLogger(__name__)

_END = End()


@dataclass(frozen=True)
class Score:
    """Program size plus step statistics over all IO cases."""
    size: int
    speed_min: int
    speed_max: int
    speed_avg: float

    @classmethod
    def from_speeds(cls, size: int, speeds: Sequence[int]) -> Score:
        if not speeds:
            return cls(size=size, speed_min=0, speed_max=0, speed_avg=0.0)
        return cls(size=size, speed_min=min(speeds), speed_max=max(speeds),
                   speed_avg=sum(speeds) / len(speeds))

    def __str__(self):
        return (f"size={self.size} speed_min={self.speed_min} "
                f"speed_max={self.speed_max} speed_avg={self.speed_avg:.2f}")


class Program:
    """Ordered instructions plus label -> instruction index table."""

    def __init__(self, commands: Iterable[Command] = (),
                 labels: Optional[Mapping[str, int]] = None):
        self.commands = tuple(commands)
        self.labels: Dict[str, int] = dict(labels or {})

    def __len__(self) -> int:
        return len(self.commands)

    def command_at(self, pc: int) -> Command:
        """Instruction at ``pc``; the End sentinel at or past the end."""
        if 0 <= pc < len(self.commands):
            return self.commands[pc]
        return _END

    def label_index(self, label: str) -> int:
        try:
            return self.labels[label]
        except KeyError:
            raise UnknownLabel(label) from None

    # ══════════════════════════════════════════════
    # Validation
    # ══════════════════════════════════════════════

    def validate(self, problem) -> None:
        """Raise the first ValidationError found; return None if the program fits."""
        memory_size = len(problem.memory)
        for command in self.commands:
            keyword = command.keyword()
            if not problem.is_command_available(keyword):
                raise CommandNotAvailable(keyword)

            index = command.requires_index()
            if index is not None and index >= memory_size:
                raise CommandIndex(index, memory_size)

            label = command.requires_label()
            if label is not None and label not in self.labels:
                raise MissingLabel(label)

        for label, index in self.labels.items():
            if index > len(self.commands):
                raise LabelIndex(label, index)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def run(self, problem, max_steps: Optional[int] = None) -> Score:
        """Run every IO case of ``problem``; the first RunError aborts the run.

        Args:
            problem: Problem to run against. Call validate() first.
            max_steps: Per-case step cap; None runs without a cap.

        Returns:
            Score over all IO cases.
        """
        speeds: List[int] = []
        for case_num, problem_io in enumerate(problem.ios, 1):
            steps = self.run_case(problem_io, problem.memory, max_steps=max_steps)
            logger.info("IO case %d: %d steps", case_num, steps)
            speeds.append(steps)

        score = Score.from_speeds(len(self.commands), speeds)
        logger.info("Score: %s", score)
        return score

    def run_case(self, problem_io, memory: Sequence, max_steps: Optional[int] = None) -> int:
        """Run a single IO case on a fresh GameState and return its step count."""
        state = GameState.for_case(problem_io, memory)
        reason = self.execute(state, max_steps=max_steps)
        logger.debug("Stopped (%s) after %d steps", reason.value, state.steps)
        if state.i_output < len(state.output):
            raise IncorrectOutput(state.output[state.i_output], None)
        return state.steps

    def execute(self, state: GameState, max_steps: Optional[int] = None) -> StopReason:
        """Drive the fetch-execute loop on ``state`` until the program stops."""
        trace = logger.isEnabledFor(logging.DEBUG)

        while True:
            command = self.command_at(state.pc)
            if isinstance(command, End):
                return StopReason.END

            if trace:
                logger.debug("%4d: %-12s %s", state.pc, command, state.display())

            state.steps += 1
            command.execute(self, state)
            next_pc = command.next(self, state)

            if state.end_of_input:
                state.steps -= 1
                return StopReason.INPUT

            if max_steps is not None and state.steps > max_steps:
                raise StepLimitExceeded(max_steps)

            state.pc = next_pc

    # ══════════════════════════════════════════════
    # Rendering
    # ══════════════════════════════════════════════

    def _labels_by_index(self) -> Dict[int, List[str]]:
        by_index: Dict[int, List[str]] = {}
        for label, index in sorted(self.labels.items(), key=lambda kv: (kv[1], kv[0])):
            by_index.setdefault(index, []).append(label)
        return by_index

    def listing(self) -> str:
        """Return a human-readable listing: index, instruction, labels."""
        by_index = self._labels_by_index()
        lines = [f"{'IDX':>4}  INSTRUCTION", "-" * 30]
        for i in range(len(self.commands) + 1):
            for label in by_index.get(i, []):
                lines.append(f"{'':4}  {label}:")
            if i < len(self.commands):
                lines.append(f"{i:4d}  {self.commands[i]}")
        lines.append(f"{len(self.commands):4d}  (end)")
        return '\n'.join(lines)

    def __str__(self):
        """Source text that compiles back to this program."""
        by_index = self._labels_by_index()
        lines = ["-- HUMAN RESOURCE MACHINE PROGRAM --", ""]
        for i in range(len(self.commands) + 1):
            for label in by_index.get(i, []):
                lines.append(f"{label}:")
            if i < len(self.commands):
                lines.append(f"    {self.commands[i]}")
        return '\n'.join(lines) + '\n'

    def __repr__(self):
        return f"Program({len(self.commands)} commands, labels={self.labels!r})"


class ProgramBuilder:
    """Accumulates instructions and labels; ``build()`` freezes them into a Program."""

    def __init__(self):
        self.commands: List[Command] = []
        self.labels: Dict[str, int] = {}

    def add_command(self, command: Command) -> ProgramBuilder:
        self.commands.append(command)
        return self

    def add_label(self, label: str) -> ProgramBuilder:
        """Bind ``label`` to the index of the next instruction added."""
        self.labels[label] = len(self.commands)
        return self

    def build(self) -> Program:
        return Program(self.commands, self.labels)
