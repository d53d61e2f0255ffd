## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from tinyforth.types import BranchCondition, Instruction, Opcode
from tinyforth.errors import ForthSyntaxError
from tinyforth.builder import PhraseBuilder
from tinyforth.control import ConditionalHelper, LoopHelper


def _helpers():
    b = PhraseBuilder()
    return b, ConditionalHelper(b), LoopHelper(b)


def test_if_then_patches_to_nop():
    b, cond, _ = _helpers()
    cond.on_if()
    assert cond.is_compiling
    b.append(Instruction.push(20))
    cond.on_then()
    assert not cond.is_compiling

    assert list(b.finish()) == [
        Instruction.branch(BranchCondition.IF_ZERO, 2),
        Instruction.push(20),
        Instruction(Opcode.NOP),
    ]


def test_if_else_then_layout():
    b, cond, _ = _helpers()
    cond.on_if()
    b.append(Instruction.push(20))
    cond.on_else()
    b.append(Instruction.push(30))
    cond.on_then()

    assert list(b.finish()) == [
        Instruction.branch(BranchCondition.IF_ZERO, 3),   # to the else-branch
        Instruction.push(20),
        Instruction.branch(BranchCondition.ALWAYS, 4),    # over the else-branch
        Instruction.push(30),
        Instruction(Opcode.NOP),
    ]


def test_nested_ifs_patch_innermost_first():
    b, cond, _ = _helpers()
    cond.on_if()
    cond.on_if()
    cond.on_then()
    assert cond.is_compiling
    cond.on_then()
    phrase = b.finish()
    assert phrase[0].target == 3 and phrase[1].target == 2


@pytest.mark.parametrize("method, message", [("on_else", "ELSE without IF"), ("on_then", "THEN without IF")])
def test_unmatched_else_then(method, message):
    _, cond, _ = _helpers()
    with pytest.raises(ForthSyntaxError, match=message):
        getattr(cond, method)()


def test_do_loop_targets_body_start():
    b, _, loops = _helpers()
    b.append(Instruction.push(5))
    b.append(Instruction.push(0))
    loops.on_do()
    assert loops.is_compiling
    b.append(Instruction(Opcode.PUSH_CONTROL_STACK_TOP))
    b.append(Instruction(Opcode.DOT))
    loops.on_loop()
    assert not loops.is_compiling

    phrase = b.finish()
    assert phrase[2] == Instruction(Opcode.DO)
    assert phrase[5] == Instruction.loop(3)


def test_loop_without_do():
    _, _, loops = _helpers()
    with pytest.raises(ForthSyntaxError, match="LOOP without DO"):
        loops.on_loop()
