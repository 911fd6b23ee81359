"""
Line-oriented compiler: HRM source text -> Program.

Each line is trimmed, then classified. The first shape that matches wins:

  1. blank                         ignored
  2. --...--                       commented-out code, ignored
  3. COMMENT n                     comment pragma, ignored
  4. DEFINE COMMENT n / LABEL n    ends the code section (drawing data follows)
  5. name:                         label, bound to the next instruction
  6. KEYWORD [args]                instruction, parsed by commands.PARSERS
  7. anything else                 IllegalLine, compilation stops

Source exported from the game looks like:

    -- HUMAN RESOURCE MACHINE PROGRAM --

    a:
        INBOX
        OUTBOX
        JUMP     a

    DEFINE LABEL 0
    eJzTYGBgEGRZ...;
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from .commands import Command, parse_command
from .errors import IllegalLine
from .program import Program, ProgramBuilder

__all__ = ['compile_code', 'compile_line', 'iter_lines', 'LineKind', 'ParsedLine']

logger = logging.getLogger(__name__)


class LineKind(Enum):
    EMPTY = 'empty'
    COMMENTED_CODE = 'commented_code'
    COMMENT = 'comment'
    DEFINE = 'define'
    LABEL = 'label'
    COMMAND = 'command'


@dataclass
class ParsedLine:
    """One classified source line."""
    kind: LineKind
    line_num: int = 0
    label: Optional[str] = None
    command: Optional[Command] = None
    number: Optional[int] = None     # COMMENT / DEFINE id
    define: Optional[str] = None     # 'COMMENT' or 'LABEL'


_COMMENT_RE = re.compile(r'COMMENT\s+([0-9]+)')
_DEFINE_RE = re.compile(r'DEFINE\s+(COMMENT|LABEL)\s+([0-9]+)')
_LABEL_RE = re.compile(r'([a-z]+):')
_COMMAND_RE = re.compile(r'([A-Z]+)(?:\s+(.*))?')


def compile_line(line: str, line_num: int = 0) -> ParsedLine:
    """Classify one line of source. Raises IllegalLine if no shape matches."""
    text = line.strip()

    if not text:
        return ParsedLine(LineKind.EMPTY, line_num)

    if len(text) >= 2 and text.startswith('--') and text.endswith('--'):
        return ParsedLine(LineKind.COMMENTED_CODE, line_num)

    m = _COMMENT_RE.fullmatch(text)
    if m:
        return ParsedLine(LineKind.COMMENT, line_num, number=int(m.group(1)))

    m = _DEFINE_RE.fullmatch(text)
    if m:
        return ParsedLine(LineKind.DEFINE, line_num,
                          define=m.group(1), number=int(m.group(2)))

    m = _LABEL_RE.fullmatch(text)
    if m:
        return ParsedLine(LineKind.LABEL, line_num, label=m.group(1))

    m = _COMMAND_RE.fullmatch(text)
    if m:
        command = parse_command(m.group(1), m.group(2) or '')
        if command is not None:
            return ParsedLine(LineKind.COMMAND, line_num, command=command)

    raise IllegalLine(text, line_num)


def iter_lines(source: str) -> Iterator[ParsedLine]:
    """Yield classified lines up to (and including) the first DEFINE."""
    for line_num, line in enumerate(source.splitlines(), 1):
        parsed = compile_line(line, line_num)
        yield parsed
        if parsed.kind is LineKind.DEFINE:
            return


def compile_code(source: str) -> Program:
    """Compile HRM source into a Program.

    Args:
        source: Program text, one instruction, label or pragma per line.

    Returns:
        The compiled Program (not yet validated against any Problem).

    Raises:
        IllegalLine: on the first line that matches no recognised shape.
    """
    builder = ProgramBuilder()
    for parsed in iter_lines(source):
        if parsed.kind is LineKind.LABEL:
            builder.add_label(parsed.label)
        elif parsed.kind is LineKind.COMMAND:
            builder.add_command(parsed.command)

    program = builder.build()
    logger.debug("Compiled %d instructions, labels: %s", len(program), program.labels)
    return program
