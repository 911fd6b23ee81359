"""
HRM Compiler & Interpreter
==========================
Compiles Human Resource Machine assembly (INBOX, OUTBOX, COPYFROM, COPYTO,
ADD, SUB, BUMPUP, BUMPDN, JUMP, JUMPZ, JUMPN), validates the program against
a puzzle definition and runs it to produce a size/speed score.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌───────────┐    ┌───────┐
    │ Source   │───>│ Compiler │───>│  Program  │───>│  Program  │───>│ Score │
    │ (.hrm)   │    │ (lines)  │    │ .validate │    │   .run    │    │       │
    └──────────┘    └──────────┘    └───────────┘    └───────────┘    └───────┘
                                          ^                ^
                    ┌──────────┐    ┌─────┴────┐           │
                    │ Problem  │───>│ Problem  │───────────┘
                    │ (.json)  │    │          │
                    └──────────┘    └──────────┘

    - compiler.py:           line classifier, keyword -> parser registry
    - commands.py:           instruction sum type + execute/next dispatch tables
    - program.py:            validate (static checks) and run (fetch-execute loop)
    - game_state.py:         per-IO-case machine state
    - value.py:              Int / Char values and their partial arithmetic
    - problem.py:            IO cases, floor template, allowed instructions
    - problem_definition.py: JSON <-> Problem
"""

__version__ = "0.1.0"

from .value import Value, Int, Char
from .errors import *
from .commands import (
    Literal, Indirect, Command, Inbox, Outbox, CopyFrom, CopyTo, Add, Sub,
    BumpUp, BumpDown, Jump, JumpZero, JumpNegative, End,
    ALL_COMMANDS, parse_command,
)
from .game_state import GameState, StopReason
from .program import Program, ProgramBuilder, Score
from .problem import Problem, ProblemIO, ProblemBuilder
from .problem_definition import problem_from_dict, problem_to_dict, load_problem
from .compiler import compile_code


def check_solution(source: str, problem: Problem, max_steps=None) -> Score:
    """Compile, validate and run ``source`` against ``problem``.

    Full pipeline: compile_code -> Program.validate -> Program.run.

    Args:
        source: HRM program text.
        problem: Problem to score against.
        max_steps: Per-IO-case step cap (None = unbounded).

    Returns:
        Score for the solution. The first CompileError, ValidationError
        or RunError propagates unchanged.
    """
    program = compile_code(source)
    program.validate(problem)
    return program.run(problem, max_steps=max_steps)
