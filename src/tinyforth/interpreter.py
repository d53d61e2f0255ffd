## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
import operator

from .types import Address, BranchCondition, CompiledPhrase, Instruction, Opcode, Stack, nil
from .errors import ForthRuntimeError, ForthStackError, ForthValueError, ForthZeroDivisionError
from .formatting import show_instruction_and_stack


WORD_BITS = 64

_ARITHMETIC = {
    Opcode.ADD: operator.add,
    Opcode.SUB: operator.sub,
    Opcode.MUL: operator.mul,
}


def wrap_integer(value: int) -> int:
    """Two's complement wrap-around, as machine integers overflow."""
    half = 1 << (WORD_BITS - 1)
    return (value + half) % (1 << WORD_BITS) - half

def truncating_divide(lhs: int, rhs: int) -> int:
    quotient = abs(lhs) // abs(rhs)
    return quotient if (lhs < 0) == (rhs < 0) else -quotient


def can_execute(insn: Instruction, stack: Stack) -> tuple[bool, str]:
    """Check the argument stack is deep enough for the instruction, before any side effect."""
    if stack.has_depth(need := insn.expected_argument_count):
        return True, ""
    return False, f"{insn}: expected {need} argument(s) but got {stack.depth()}"


class VM:
    """Executes compiled phrases against an argument stack and a control stack of (index, limit) pairs."""

    def __init__(self, verbosity: int = 0, trace_file=None, stats: dict | None = None):
        self.stack = nil
        self.control = nil
        self.output = ""
        self.verbosity = verbosity
        self.trace_file = trace_file
        self.stats = stats
        self.steps = 0

    def reset_after_error(self) -> None:
        self.stack = nil
        self.control = nil

    def _push(self, value: int) -> None:
        self.stack = Stack(self.stack, value)

    def _pop(self) -> int:
        self.stack, value = self.stack
        return value

    def execute_phrase(self, phrase: CompiledPhrase) -> None:
        """Run a phrase from address 0 to its end; a failure clears both stacks and is re-raised."""
        start = self.steps
        try:
            self._run(phrase)
        except ForthRuntimeError:
            self.reset_after_error()
            raise
        finally:
            if self.stats is not None:
                self.stats['steps'] = self.stats.get('steps', 0) + self.steps - start

    def _run(self, phrase: CompiledPhrase) -> None:
        """Interpret a phrase, keeping the callers of nested words as (phrase, pc) frames on a list."""
        frames: list[tuple[CompiledPhrase, Address]] = []
        first = self.steps
        pc = 0
        while True:
            if pc >= len(phrase):
                if not frames: break
                phrase, pc = frames.pop()
                continue

            insn = phrase[pc]
            if self.verbosity == 2 or (self.verbosity == 1 and (insn.opcode == Opcode.CALL or self.steps == first)):
                self._trace(len(frames), insn)
            self.steps += 1

            if insn.opcode == Opcode.CALL:
                frames.append((phrase, pc + 1))
                phrase, pc = insn.operand, 0
            else:
                pc = self.execute_instruction(pc, insn)

        if self.verbosity > 0 and self.steps > first:
            self._trace(0, None)

    def _trace(self, depth: int, insn: Instruction | None) -> None:
        show_instruction_and_stack(self.steps, depth, insn, self.stack, file=self.trace_file or sys.stderr)

    def execute_instruction(self, pc: Address, insn: Instruction) -> Address:
        """Execute one instruction and return the address of the next one."""
        ok, message = can_execute(insn, self.stack)
        if not ok:
            raise ForthStackError(message, forth_insn=insn, expected=insn.expected_argument_count, actual=self.stack.depth())

        match insn.opcode:
            case Opcode.ADD | Opcode.SUB | Opcode.MUL:
                rhs, lhs = self._pop(), self._pop()
                self._push(wrap_integer(_ARITHMETIC[insn.opcode](lhs, rhs)))
            case Opcode.DIV:
                rhs, lhs = self._pop(), self._pop()
                if rhs == 0:
                    raise ForthZeroDivisionError("division by zero", forth_insn=insn)
                self._push(wrap_integer(truncating_divide(lhs, rhs)))
            case Opcode.DOT:
                self.output += f"{self._pop()} "
            case Opcode.EMIT:
                code = self._pop()
                try:
                    # Lone surrogates are not characters and cannot be encoded for output.
                    if 0xD800 <= code <= 0xDFFF: raise ValueError(code)
                    self.output += chr(code)
                except (ValueError, OverflowError):
                    raise ForthValueError(f"EMIT: invalid character code {code}", forth_insn=insn) from None
            case Opcode.PUSH_CONSTANT:
                self._push(insn.operand)
            case Opcode.PUSH_CONTROL_STACK_TOP:
                if self.control is nil:
                    raise ForthStackError("I: not enough arguments on control stack", forth_insn=insn, expected=1, actual=0)
                self._push(self.control.head)
            case Opcode.CALL:
                self._run(insn.operand)
            case Opcode.BRANCH:
                if insn.operand is BranchCondition.ALWAYS or self._pop() == 0:
                    return insn.target
            case Opcode.DO:
                # `limit base DO`: the running index starts from the top of the stack.
                base, limit = self._pop(), self._pop()
                self.control = self.control.pushed(limit, base)
            case Opcode.LOOP:
                if not self.control.has_depth(2):
                    raise ForthStackError("LOOP: not enough arguments on control stack", forth_insn=insn,
                                          expected=2, actual=self.control.depth())
                (rest, limit), index = self.control
                if (index := index + 1) < limit:
                    self.control = rest.pushed(limit, index)
                    return insn.target
                self.control = rest
            case Opcode.NOP:
                pass

        return pc + 1
