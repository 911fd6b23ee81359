"""
Per-run virtual machine state.

One GameState is created for each IO case and thrown away afterwards:

  input        — input tape (read-only), consumed by INBOX
  output       — expected output tape (read-only), checked by OUTBOX
  memory       — floor cells, list of Optional[Value], fixed length
  acc          — accumulator, Optional[Value]
  i_input      — input cursor
  i_output     — output cursor
  pc           — program counter (index into Program.commands)
  steps        — executed instruction counter
  end_of_input — set by an INBOX that found the input tape empty

Instructions never hold run state; everything that changes while a
program runs lives here.
"""

from __future__ import annotations
from enum import Enum
from typing import List, Optional, Sequence

from .value import Value

__all__ = ['GameState', 'StopReason']


class StopReason(Enum):
    END = 'END'        # pc ran past the last instruction
    INPUT = 'INPUT'    # INBOX found no more input


class GameState:
    """Mutable machine state for a single IO case."""

    __slots__ = ('input', 'output', 'memory', 'acc',
                 'i_input', 'i_output', 'pc', 'steps', 'end_of_input')

    def __init__(self, input_tape: Sequence[Value] = (), output_tape: Sequence[Value] = (),
                 memory: Optional[List[Optional[Value]]] = None,
                 acc: Optional[Value] = None, i_input: int = 0, i_output: int = 0,
                 pc: int = 0, steps: int = 0):
        self.input = tuple(input_tape)
        self.output = tuple(output_tape)
        self.memory: List[Optional[Value]] = list(memory) if memory is not None else []
        self.acc = acc
        self.i_input = i_input
        self.i_output = i_output
        self.pc = pc
        self.steps = steps
        self.end_of_input = False

    @classmethod
    def for_case(cls, problem_io, memory: Sequence[Optional[Value]]) -> GameState:
        """Fresh state for one IO case; ``memory`` is copied."""
        return cls(input_tape=problem_io.input, output_tape=problem_io.output,
                   memory=list(memory))

    @property
    def has_input(self) -> bool:
        return self.i_input < len(self.input)

    def display(self) -> str:
        """One-line summary for trace logging."""
        acc = '-' if self.acc is None else repr(self.acc)
        return (f"pc={self.pc} acc={acc} in={self.i_input}/{len(self.input)} "
                f"out={self.i_output}/{len(self.output)} steps={self.steps}")

    def __repr__(self):
        return f"GameState({self.display()})"
