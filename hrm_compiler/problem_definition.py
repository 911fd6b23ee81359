"""
Problem definition interchange (JSON) <-> Problem.

Shape:

    {
      "ios": [{"input": [1, "A"], "output": [1, "A"]}],
      "memory": {"full": [null, 0, "B"]},                        (optional)
             or {"partial": {"dim": 5, "values": {"4": 0}}},
      "commands": ["INBOX", "OUTBOX", ...]
    }

JSON integers become Int, one-character strings become Char, null is an
empty cell. A missing "memory" key means an empty floor. Malformed input
raises ProblemError.
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List

from .errors import ProblemError
from .problem import Problem, ProblemBuilder, ProblemIO
from .value import value_from_json, value_to_json

__all__ = ['problem_from_dict', 'problem_to_dict', 'load_problem', 'loads_problem']

logger = logging.getLogger(__name__)


def _values(raw, where: str) -> List:
    if not isinstance(raw, list):
        raise ProblemError(f"{where}: expected a list, got {type(raw).__name__}")
    try:
        return [value_from_json(v) for v in raw]
    except (TypeError, ValueError) as e:
        raise ProblemError(f"{where}: {e}") from e


def _slot(raw, where: str):
    if raw is None:
        return None
    try:
        return value_from_json(raw)
    except (TypeError, ValueError) as e:
        raise ProblemError(f"{where}: {e}") from e


def _apply_memory(builder: ProblemBuilder, memory: Dict[str, Any]) -> None:
    if not isinstance(memory, dict):
        raise ProblemError("memory: expected an object")

    if 'full' in memory:
        full = memory['full']
        if not isinstance(full, list):
            raise ProblemError("memory.full: expected a list")
        builder.memory_dim(len(full))
        for i, raw in enumerate(full):
            value = _slot(raw, f"memory.full[{i}]")
            if value is not None:
                builder.add_memory_slot(i, value)

    elif 'partial' in memory:
        partial = memory['partial']
        if not isinstance(partial, dict) or 'dim' not in partial:
            raise ProblemError("memory.partial: expected an object with 'dim'")
        dim = partial['dim']
        if isinstance(dim, bool) or not isinstance(dim, int):
            raise ProblemError(f"memory.partial.dim: expected an integer, got {dim!r}")
        builder.memory_dim(dim)
        values = partial.get('values', {})
        if not isinstance(values, dict):
            raise ProblemError("memory.partial.values: expected an object")
        for key, raw in values.items():
            try:
                slot = int(key)
            except ValueError:
                raise ProblemError(f"memory.partial.values: bad slot {key!r}") from None
            value = _slot(raw, f"memory.partial.values[{key}]")
            if value is not None:
                builder.add_memory_slot(slot, value)

    else:
        raise ProblemError("memory: expected 'full' or 'partial'")


def problem_from_dict(data: Dict[str, Any]) -> Problem:
    """Build a Problem from the decoded JSON shape."""
    if not isinstance(data, dict):
        raise ProblemError("problem definition must be a JSON object")

    builder = ProblemBuilder()

    ios = data.get('ios')
    if not isinstance(ios, list):
        raise ProblemError("ios: expected a list of IO cases")
    for n, case in enumerate(ios):
        if not isinstance(case, dict):
            raise ProblemError(f"ios[{n}]: expected an object")
        builder.add_io(ProblemIO(
            _values(case.get('input', []), f"ios[{n}].input"),
            _values(case.get('output', []), f"ios[{n}].output"),
        ))

    memory = data.get('memory')
    if memory is not None:
        _apply_memory(builder, memory)

    commands = data.get('commands', [])
    if not isinstance(commands, list):
        raise ProblemError("commands: expected a list of keywords")
    for keyword in commands:
        if not isinstance(keyword, str):
            raise ProblemError(f"commands: expected a keyword string, got {keyword!r}")
        builder.enable_command(keyword)

    return builder.build()


def problem_to_dict(problem: Problem) -> Dict[str, Any]:
    """Inverse of problem_from_dict; memory is always written in "full" form."""
    data: Dict[str, Any] = {
        'ios': [
            {'input': [value_to_json(v) for v in io.input],
             'output': [value_to_json(v) for v in io.output]}
            for io in problem.ios
        ],
        'commands': sorted(problem.available_commands),
    }
    if problem.memory:
        data['memory'] = {
            'full': [None if v is None else value_to_json(v) for v in problem.memory],
        }
    return data


def loads_problem(text: str) -> Problem:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProblemError(f"invalid JSON: {e}") from e
    return problem_from_dict(data)


def load_problem(path: str) -> Problem:
    """Read and build a Problem from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        problem = loads_problem(f.read())
    logger.debug("Loaded problem %s: %d IO cases, %d memory cells, commands=%s",
                 path, len(problem.ios), len(problem.memory),
                 sorted(problem.available_commands))
    return problem
