"""
Instruction tests.

Each instruction is executed directly against a hand-built GameState,
with a tiny Program supplying labels where jumps need them.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hrm_compiler.commands import (
    Literal, Indirect, resolve_index, parse_command, parse_command_value, parse_label,
    Inbox, Outbox, CopyFrom, CopyTo, Add, Sub, BumpUp, BumpDown,
    Jump, JumpZero, JumpNegative, End, ALL_COMMANDS, PARSERS, COMMAND_TYPES,
)
from hrm_compiler.errors import (
    EmptyAccumulator, EmptyMemory, IndexOutOfRange, CharUsedAsIndex,
    IncompatibleTypes, IncorrectOutput, UnknownLabel,
)
from hrm_compiler.game_state import GameState
from hrm_compiler.program import Program
from hrm_compiler.value import Int, Char


def _state(memory=None, acc=None, input_tape=(), output_tape=(), pc=0) -> GameState:
    return GameState(input_tape=input_tape, output_tape=output_tape, memory=memory, acc=acc, pc=pc)


def _program(n_commands: int = 4, **labels) -> Program:
    return Program([Inbox()] * n_commands, labels)


# ─── Addressing ─────────────────────

class TestResolveIndex:
    def test_literal(self):
        assert resolve_index(Literal(2), [None, None, None]) == 2

    def test_literal_out_of_range(self):
        with pytest.raises(IndexOutOfRange):
            resolve_index(Literal(3), [None, None, None])

    def test_indirect(self):
        assert resolve_index(Indirect(0), [Int(2), None, None]) == 2

    def test_indirect_empty_pointer(self):
        with pytest.raises(EmptyMemory) as exc:
            resolve_index(Indirect(1), [None, None])
        assert exc.value.index == 1

    def test_indirect_through_char(self):
        with pytest.raises(CharUsedAsIndex) as exc:
            resolve_index(Indirect(0), [Char('A'), None])
        assert exc.value.value == Char('A')

    @pytest.mark.parametrize("pointer", [-1, 2])
    def test_indirect_target_out_of_range(self, pointer):
        with pytest.raises(IndexOutOfRange) as exc:
            resolve_index(Indirect(0), [Int(pointer), None])
        assert exc.value.value == Int(pointer)


# ─── Execute ─────────────────────

class TestInboxOutbox:
    def test_inbox_pops_input(self):
        state = _state(input_tape=[Int(5), Int(6)])
        Inbox().execute(_program(), state)
        assert state.acc == Int(5)
        assert state.i_input == 1
        assert not state.end_of_input

    def test_inbox_on_empty_input_marks_end(self):
        program = _program(3)
        state = _state(input_tape=[], acc=Int(9))
        Inbox().execute(program, state)
        assert state.end_of_input
        assert state.acc == Int(9)
        assert Inbox().next(program, state) == 3

    def test_has_input_tracks_cursor(self):
        state = _state(input_tape=[Int(1)])
        assert state.has_input
        Inbox().execute(_program(), state)
        assert not state.has_input

    def test_outbox_match(self):
        state = _state(acc=Int(4), output_tape=[Int(4)])
        Outbox().execute(_program(), state)
        assert state.i_output == 1
        assert state.acc == Int(4)

    def test_outbox_mismatch(self):
        state = _state(acc=Int(3), output_tape=[Int(4)])
        with pytest.raises(IncorrectOutput) as exc:
            Outbox().execute(_program(), state)
        assert exc.value.expected == Int(4)
        assert exc.value.actual == Int(3)
        assert state.i_output == 0

    def test_outbox_past_end_of_output(self):
        state = _state(acc=Int(3), output_tape=[])
        with pytest.raises(IncorrectOutput) as exc:
            Outbox().execute(_program(), state)
        assert exc.value.expected is None
        assert exc.value.actual == Int(3)

    def test_outbox_empty_accumulator(self):
        with pytest.raises(EmptyAccumulator):
            Outbox().execute(_program(), _state(output_tape=[Int(1)]))


class TestCopy:
    def test_copyfrom(self):
        state = _state(memory=[Char('Q')])
        CopyFrom(Literal(0)).execute(_program(), state)
        assert state.acc == Char('Q')

    def test_copyfrom_empty_cell(self):
        with pytest.raises(EmptyMemory):
            CopyFrom(Literal(0)).execute(_program(), _state(memory=[None]))

    def test_copyto(self):
        state = _state(memory=[None, None], acc=Int(7))
        CopyTo(Literal(1)).execute(_program(), state)
        assert state.memory == [None, Int(7)]
        assert state.acc == Int(7)

    def test_copyto_indirect(self):
        state = _state(memory=[Int(2), None, None], acc=Int(7))
        CopyTo(Indirect(0)).execute(_program(), state)
        assert state.memory[2] == Int(7)

    def test_copyto_empty_accumulator(self):
        with pytest.raises(EmptyAccumulator):
            CopyTo(Literal(0)).execute(_program(), _state(memory=[None]))


class TestArithmetic:
    def test_add(self):
        state = _state(memory=[Int(3)], acc=Int(4))
        Add(Literal(0)).execute(_program(), state)
        assert state.acc == Int(7)
        assert state.memory == [Int(3)]

    def test_sub(self):
        state = _state(memory=[Int(3)], acc=Int(4))
        Sub(Literal(0)).execute(_program(), state)
        assert state.acc == Int(1)

    def test_sub_chars(self):
        state = _state(memory=[Char('A')], acc=Char('D'))
        Sub(Literal(0)).execute(_program(), state)
        assert state.acc == Int(3)

    def test_add_through_char_pointer(self):
        state = _state(memory=[Char('A')], acc=Int(1))
        with pytest.raises(CharUsedAsIndex):
            Add(Indirect(0)).execute(_program(), state)

    def test_add_mixed_types(self):
        state = _state(memory=[Char('A')], acc=Int(1))
        with pytest.raises(IncompatibleTypes):
            Add(Literal(0)).execute(_program(), state)

    def test_add_empty_accumulator(self):
        with pytest.raises(EmptyAccumulator):
            Add(Literal(0)).execute(_program(), _state(memory=[Int(1)]))

    def test_sub_empty_cell(self):
        with pytest.raises(EmptyMemory):
            Sub(Literal(0)).execute(_program(), _state(memory=[None], acc=Int(1)))


class TestBump:
    def test_bumpup(self):
        state = _state(memory=[Int(9)])
        BumpUp(Literal(0)).execute(_program(), state)
        assert state.memory == [Int(10)]
        assert state.acc == Int(10)

    def test_bumpdown_indirect(self):
        state = _state(memory=[Int(1), Int(0)])
        BumpDown(Indirect(0)).execute(_program(), state)
        assert state.memory == [Int(1), Int(-1)]
        assert state.acc == Int(-1)

    def test_bump_char_fails(self):
        with pytest.raises(IncompatibleTypes):
            BumpUp(Literal(0)).execute(_program(), _state(memory=[Char('A')]))

    def test_bump_empty_cell(self):
        with pytest.raises(EmptyMemory):
            BumpDown(Literal(0)).execute(_program(), _state(memory=[None]))


# ─── Next pc ─────────────────────

class TestJumps:
    def test_default_next(self):
        assert CopyTo(Literal(0)).next(_program(), _state(pc=2)) == 3

    def test_jump(self):
        assert Jump('a').next(_program(a=3), _state(pc=0)) == 3

    def test_jump_unknown_label(self):
        with pytest.raises(UnknownLabel) as exc:
            Jump('zz').next(_program(), _state())
        assert exc.value.label == 'zz'

    @pytest.mark.parametrize("acc,taken", [
        (Int(0), True), (Int(1), False), (Int(-1), False), (Char('0'), False),
    ])
    def test_jumpz(self, acc, taken):
        state = _state(acc=acc, pc=1)
        JumpZero('a').execute(_program(a=0), state)
        assert JumpZero('a').next(_program(a=0), state) == (0 if taken else 2)

    @pytest.mark.parametrize("acc,taken", [
        (Int(-1), True), (Int(0), False), (Int(5), False), (Char('-'), False),
    ])
    def test_jumpn(self, acc, taken):
        state = _state(acc=acc, pc=1)
        assert JumpNegative('a').next(_program(a=0), state) == (0 if taken else 2)

    def test_conditional_empty_accumulator(self):
        with pytest.raises(EmptyAccumulator):
            JumpZero('a').execute(_program(a=0), _state())
        with pytest.raises(EmptyAccumulator):
            JumpNegative('a').execute(_program(a=0), _state())

    def test_end_stays(self):
        assert End().next(_program(), _state(pc=4)) == 4


# ─── Static requirements ─────────────────────

class TestRequirements:
    def test_requires_index(self):
        assert CopyFrom(Literal(3)).requires_index() == 3
        assert BumpDown(Indirect(0)).requires_index() == 0
        assert Inbox().requires_index() is None
        assert Jump('a').requires_index() is None

    def test_requires_label(self):
        assert JumpNegative('loop').requires_label() == 'loop'
        assert Add(Literal(0)).requires_label() is None

    def test_keywords(self):
        assert BumpDown(Literal(0)).keyword() == 'BUMPDN'
        assert JumpZero('a').keyword() == 'JUMPZ'
        assert End().keyword() is None

    def test_commands_are_stateless_values(self):
        assert Inbox() == Inbox()
        assert CopyTo(Indirect(1)) == CopyTo(Indirect(1))
        assert CopyTo(Indirect(1)) != CopyTo(Literal(1))
        assert CopyFrom(Literal(1)) != CopyTo(Literal(1))


# ─── Parsing ─────────────────────

class TestParsing:
    def test_registry_covers_every_kind(self):
        assert len(COMMAND_TYPES) == 11
        assert ALL_COMMANDS == frozenset(PARSERS)
        assert ALL_COMMANDS == {cls.KEYWORD for cls in COMMAND_TYPES}

    def test_command_value(self):
        assert parse_command_value('12') == Literal(12)
        assert parse_command_value('[3]') == Indirect(3)
        for bad in ('', '-1', '[ 3]', '[3', 'a', '1 2', '[[1]]'):
            assert parse_command_value(bad) is None, bad

    def test_label(self):
        assert parse_label('abc') == 'abc'
        for bad in ('', 'A', 'a1', 'a b', 'a:'):
            assert parse_label(bad) is None, bad

    def test_parse_command(self):
        cases = [
            ('INBOX', '', Inbox()),
            ('OUTBOX', '', Outbox()),
            ('COPYFROM', '0', CopyFrom(Literal(0))),
            ('COPYTO', '[1]', CopyTo(Indirect(1))),
            ('ADD', '2', Add(Literal(2))),
            ('SUB', '[3]', Sub(Indirect(3))),
            ('BUMPUP', '4', BumpUp(Literal(4))),
            ('BUMPDN', '[5]', BumpDown(Indirect(5))),
            ('JUMP', 'a', Jump('a')),
            ('JUMPZ', 'b', JumpZero('b')),
            ('JUMPN', 'c', JumpNegative('c')),
        ]
        for keyword, args, expected in cases:
            assert parse_command(keyword, args) == expected, keyword

    def test_parse_command_rejects(self):
        assert parse_command('INBOX', '1') is None
        assert parse_command('COPYFROM', '') is None
        assert parse_command('JUMP', '0') is None
        assert parse_command('BUMPDOWN', '0') is None
        assert parse_command('inbox', '') is None

    def test_str_is_source_syntax(self):
        assert str(Inbox()) == 'INBOX'
        assert str(CopyFrom(Indirect(4))) == 'COPYFROM [4]'
        assert str(JumpNegative('x')) == 'JUMPN x'
