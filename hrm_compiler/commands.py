"""
HRM instruction set.

Eleven instructions plus the implicit terminator:

  INH  — no operand        INBOX, OUTBOX
  MEM  — memory operand    COPYFROM, COPYTO, ADD, SUB, BUMPUP, BUMPDN
  LBL  — label operand     JUMP, JUMPZ, JUMPN
  END  — terminator, appended implicitly at pc == len(program)

Memory operand grammar:
  n      Literal(n)   — cell n
  [n]    Indirect(n)  — cell whose index is the Int stored in cell n

Label operand grammar: one or more lowercase letters.

Every instruction kind is a frozen dataclass with no run state. Behaviour
lives in the dispatch tables at the bottom of this module (_EXECUTORS,
_NEXT), keyed by instruction type. The keyword registry PARSERS is derived
from COMMAND_TYPES, and ALL_COMMANDS from PARSERS.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from .errors import (
    EmptyAccumulator, EmptyMemory, IndexOutOfRange, CharUsedAsIndex, IncorrectOutput,
)
from .value import Value, Int, Char

__all__ = [
    'Literal', 'Indirect', 'CommandValue', 'resolve_index',
    'Command', 'MemoryCommand', 'JumpCommand',
    'Inbox', 'Outbox', 'CopyFrom', 'CopyTo', 'Add', 'Sub', 'BumpUp', 'BumpDown',
    'Jump', 'JumpZero', 'JumpNegative', 'End',
    'COMMAND_TYPES', 'PARSERS', 'ALL_COMMANDS',
    'parse_command', 'parse_command_value', 'parse_label',
]

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Addressing modes
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Literal:
    """Operand ``n``: the index is used as-is."""
    index: int

    def __str__(self):
        return str(self.index)


@dataclass(frozen=True)
class Indirect:
    """Operand ``[n]``: the Int held in cell n is the real index."""
    index: int

    def __str__(self):
        return f"[{self.index}]"


CommandValue = Union[Literal, Indirect]


def resolve_index(mode: CommandValue, memory: List[Optional[Value]]) -> int:
    """Resolve an operand to a concrete, in-bounds memory index.

    Raises IndexOutOfRange, EmptyMemory (indirect through an empty cell)
    or CharUsedAsIndex (indirect through a Char).
    """
    if isinstance(mode, Literal):
        if not 0 <= mode.index < len(memory):
            raise IndexOutOfRange(mode.index)
        return mode.index

    if not 0 <= mode.index < len(memory):
        raise IndexOutOfRange(mode.index)
    pointer = memory[mode.index]
    if pointer is None:
        raise EmptyMemory(mode.index)
    if isinstance(pointer, Char):
        raise CharUsedAsIndex(pointer)
    if not 0 <= pointer.value < len(memory):
        raise IndexOutOfRange(pointer)
    return pointer.value


def _acc(state) -> Value:
    if state.acc is None:
        raise EmptyAccumulator()
    return state.acc


def _cell(state, index: int) -> Value:
    value = state.memory[index]
    if value is None:
        raise EmptyMemory(index)
    return value


# ──────────────────────────────────────────────
# Instruction kinds
# ──────────────────────────────────────────────

class Command:
    """Common interface. KEYWORD is the dispatch token ("INBOX", "ADD", ...)."""

    KEYWORD: Optional[str] = None

    def keyword(self) -> Optional[str]:
        return self.KEYWORD

    def execute(self, program, state) -> None:
        """Mutate ``state``; never touches ``state.pc``."""
        _EXECUTORS[type(self)](self, program, state)

    def next(self, program, state) -> int:
        """Index of the instruction to run after this one."""
        return _NEXT.get(type(self), _next_step)(self, program, state)

    def requires_index(self) -> Optional[int]:
        """Memory cell this instruction statically touches, if any."""
        return None

    def requires_label(self) -> Optional[str]:
        """Label this instruction jumps to, if any."""
        return None

    def __str__(self):
        return self.KEYWORD or ''


@dataclass(frozen=True)
class Inbox(Command):
    KEYWORD = 'INBOX'


@dataclass(frozen=True)
class Outbox(Command):
    KEYWORD = 'OUTBOX'


@dataclass(frozen=True)
class MemoryCommand(Command):
    mode: CommandValue

    def requires_index(self) -> Optional[int]:
        # An indirect operand still reads its pointer cell.
        return self.mode.index

    def __str__(self):
        return f"{self.KEYWORD} {self.mode}"


@dataclass(frozen=True)
class CopyFrom(MemoryCommand):
    KEYWORD = 'COPYFROM'


@dataclass(frozen=True)
class CopyTo(MemoryCommand):
    KEYWORD = 'COPYTO'


@dataclass(frozen=True)
class Add(MemoryCommand):
    KEYWORD = 'ADD'


@dataclass(frozen=True)
class Sub(MemoryCommand):
    KEYWORD = 'SUB'


@dataclass(frozen=True)
class BumpUp(MemoryCommand):
    KEYWORD = 'BUMPUP'


@dataclass(frozen=True)
class BumpDown(MemoryCommand):
    KEYWORD = 'BUMPDN'


@dataclass(frozen=True)
class JumpCommand(Command):
    label: str

    def requires_label(self) -> Optional[str]:
        return self.label

    def __str__(self):
        return f"{self.KEYWORD} {self.label}"


@dataclass(frozen=True)
class Jump(JumpCommand):
    KEYWORD = 'JUMP'


@dataclass(frozen=True)
class JumpZero(JumpCommand):
    KEYWORD = 'JUMPZ'


@dataclass(frozen=True)
class JumpNegative(JumpCommand):
    KEYWORD = 'JUMPN'


@dataclass(frozen=True)
class End(Command):
    """Implicit terminator at pc == len(program). Has no keyword."""


# ──────────────────────────────────────────────
# Execute handlers: handler(command, program, state)
# ──────────────────────────────────────────────

def _exec_inbox(cmd, program, state):
    if not state.has_input:
        state.end_of_input = True
        return
    state.acc = state.input[state.i_input]
    state.i_input += 1


def _exec_outbox(cmd, program, state):
    value = _acc(state)
    logger.debug("OUTBOX produced %r", value)
    if state.i_output >= len(state.output):
        raise IncorrectOutput(None, value)
    expected = state.output[state.i_output]
    if value != expected:
        raise IncorrectOutput(expected, value)
    state.i_output += 1


def _exec_copyfrom(cmd, program, state):
    index = resolve_index(cmd.mode, state.memory)
    state.acc = _cell(state, index)


def _exec_copyto(cmd, program, state):
    value = _acc(state)
    index = resolve_index(cmd.mode, state.memory)
    state.memory[index] = value


def _exec_add(cmd, program, state):
    value = _acc(state)
    index = resolve_index(cmd.mode, state.memory)
    state.acc = value.add(_cell(state, index))


def _exec_sub(cmd, program, state):
    value = _acc(state)
    index = resolve_index(cmd.mode, state.memory)
    state.acc = value.sub(_cell(state, index))


def _exec_bumpup(cmd, program, state):
    index = resolve_index(cmd.mode, state.memory)
    bumped = _cell(state, index).add(Int(1))
    state.memory[index] = bumped
    state.acc = bumped


def _exec_bumpdown(cmd, program, state):
    index = resolve_index(cmd.mode, state.memory)
    bumped = _cell(state, index).sub(Int(1))
    state.memory[index] = bumped
    state.acc = bumped


def _exec_nop(cmd, program, state):
    pass


def _exec_conditional(cmd, program, state):
    _acc(state)


_EXECUTORS: Dict[type, Callable] = {
    Inbox:        _exec_inbox,
    Outbox:       _exec_outbox,
    CopyFrom:     _exec_copyfrom,
    CopyTo:       _exec_copyto,
    Add:          _exec_add,
    Sub:          _exec_sub,
    BumpUp:       _exec_bumpup,
    BumpDown:     _exec_bumpdown,
    Jump:         _exec_nop,
    JumpZero:     _exec_conditional,
    JumpNegative: _exec_conditional,
    End:          _exec_nop,
}


# ──────────────────────────────────────────────
# Next-pc handlers, default pc + 1
# ──────────────────────────────────────────────

def _next_step(cmd, program, state) -> int:
    return state.pc + 1


def _next_inbox(cmd, program, state) -> int:
    if state.end_of_input:
        return len(program)
    return state.pc + 1


def _next_jump(cmd, program, state) -> int:
    return program.label_index(cmd.label)


def _next_jump_zero(cmd, program, state) -> int:
    if _acc(state).is_zero():
        return program.label_index(cmd.label)
    return state.pc + 1


def _next_jump_negative(cmd, program, state) -> int:
    if _acc(state).is_negative():
        return program.label_index(cmd.label)
    return state.pc + 1


def _next_end(cmd, program, state) -> int:
    return state.pc


_NEXT: Dict[type, Callable] = {
    Inbox:        _next_inbox,
    Jump:         _next_jump,
    JumpZero:     _next_jump_zero,
    JumpNegative: _next_jump_negative,
    End:          _next_end,
}


# ──────────────────────────────────────────────
# Operand grammar + keyword registry
# ──────────────────────────────────────────────

_VALUE_RE = re.compile(r'\[([0-9]+)\]|([0-9]+)')
_LABEL_RE = re.compile(r'[a-z]+')


def parse_command_value(text: str) -> Optional[CommandValue]:
    """``n`` -> Literal(n), ``[n]`` -> Indirect(n), anything else -> None."""
    m = _VALUE_RE.fullmatch(text)
    if m is None:
        return None
    if m.group(1) is not None:
        return Indirect(int(m.group(1)))
    return Literal(int(m.group(2)))


def parse_label(text: str) -> Optional[str]:
    """Lowercase a-z, at least one letter; anything else -> None."""
    return text if _LABEL_RE.fullmatch(text) else None


def _no_args(cls):
    def parse(args: str) -> Optional[Command]:
        return cls() if args == '' else None
    return parse


def _memory_arg(cls):
    def parse(args: str) -> Optional[Command]:
        mode = parse_command_value(args)
        return cls(mode) if mode is not None else None
    return parse


def _label_arg(cls):
    def parse(args: str) -> Optional[Command]:
        label = parse_label(args)
        return cls(label) if label is not None else None
    return parse


# Registration order doubles as the order used by listings and docs.
COMMAND_TYPES: Tuple[type, ...] = (
    Inbox, Outbox,
    CopyFrom, CopyTo, Add, Sub, BumpUp, BumpDown,
    Jump, JumpZero, JumpNegative,
)


def _parser_for(cls) -> Callable[[str], Optional[Command]]:
    if issubclass(cls, MemoryCommand):
        return _memory_arg(cls)
    if issubclass(cls, JumpCommand):
        return _label_arg(cls)
    return _no_args(cls)


PARSERS: Dict[str, Callable[[str], Optional[Command]]] = {
    cls.KEYWORD: _parser_for(cls) for cls in COMMAND_TYPES
}

ALL_COMMANDS = frozenset(PARSERS)


def parse_command(keyword: str, args: str) -> Optional[Command]:
    """Exact keyword lookup, then strict argument parse. None on any mismatch."""
    parser = PARSERS.get(keyword)
    if parser is None:
        return None
    return parser(args)
