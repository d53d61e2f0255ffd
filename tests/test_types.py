## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from tinyforth.types import (Stack, nil, Opcode, BranchCondition, Instruction, CompiledPhrase,
                             Definition, SpecialForm)


def test_stack_nil_is_singleton():
    with pytest.raises(ValueError):
        Stack(None, None)


def test_stack_truth_value_is_ambiguous():
    with pytest.raises(TypeError):
        bool(nil.pushed(1))


def test_stack_depth_checks():
    stack = nil.pushed(1, 2, 3)
    assert stack.depth() == 3
    assert stack.has_depth(3)
    assert not stack.has_depth(4)
    assert nil.has_depth(0)
    assert repr(stack) == "< 1 2 3 >"


def test_expected_argument_counts():
    assert Instruction(Opcode.NOP).expected_argument_count == 0
    assert Instruction(Opcode.ADD).expected_argument_count == 2
    assert Instruction(Opcode.DIV).expected_argument_count == 2
    assert Instruction(Opcode.DOT).expected_argument_count == 1
    assert Instruction(Opcode.EMIT).expected_argument_count == 1
    assert Instruction(Opcode.DO).expected_argument_count == 2
    assert Instruction.push(7).expected_argument_count == 0
    assert Instruction.loop(0).expected_argument_count == 0
    assert Instruction(Opcode.PUSH_CONTROL_STACK_TOP).expected_argument_count == 0
    assert Instruction.call("foo", CompiledPhrase()).expected_argument_count == 0
    assert Instruction.branch(BranchCondition.ALWAYS, 0).expected_argument_count == 0
    assert Instruction.branch(BranchCondition.IF_ZERO, 0).expected_argument_count == 1


def test_instruction_descriptions():
    assert str(Instruction(Opcode.ADD)) == "add"
    assert str(Instruction.push(13)) == "pushConstant(13)"
    assert str(Instruction.call("CR", CompiledPhrase())) == "call(CR)"
    assert str(Instruction.branch(BranchCondition.IF_ZERO, 4)) == "branch(ifZero, 4)"
    assert str(Instruction.branch(BranchCondition.ALWAYS)) == "branch(always, ?)"
    assert str(Instruction.loop(2)) == "loop(2)"
    assert str(Instruction(Opcode.PUSH_CONTROL_STACK_TOP)) == "pushControlStackTop"


def test_resolving_a_branch_keeps_its_condition():
    insn = Instruction.branch(BranchCondition.IF_ZERO)
    assert insn.is_unresolved_branch
    resolved = insn.resolved(3)
    assert resolved.target == 3 and resolved.operand is BranchCondition.IF_ZERO
    assert not resolved.is_unresolved_branch
    assert insn.target is None


def test_phrase_rejects_unresolved_branches():
    with pytest.raises(AssertionError):
        CompiledPhrase((Instruction.branch(BranchCondition.ALWAYS),))


def test_phrase_description_and_indexing():
    phrase = CompiledPhrase((Instruction.push(13), Instruction(Opcode.EMIT)))
    assert len(phrase) == 2
    assert phrase[1].opcode == Opcode.EMIT
    assert str(phrase) == "0:pushConstant(13) 1:emit "


def test_definition_kinds():
    assert Definition("IF", SpecialForm.IF).is_special_form
    assert not Definition("k", CompiledPhrase((Instruction.push(42),))).is_special_form
