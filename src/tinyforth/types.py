## tinyforth — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from enum import Enum, IntEnum
from collections import namedtuple
from dataclasses import dataclass, replace


# Stack type is a namedtuple to save memory, yet provide tail/head accessors.
class Stack(namedtuple('Stack', ['tail', 'head'])):
    __slots__ = ()
    _nil_singleton = None

    def __new__(cls, tail, head):
        if tail is None and head is None:
            # Only one singleton creation is allowed, and it's the one just below.
            if cls._nil_singleton is None:
                self = super(Stack, cls).__new__(cls, tail, head)
                cls._nil_singleton = self
                return self
            # By convention, all other code should use `nil` explicitly.
            raise ValueError("Use the canonical `nil` instance for empty stacks")
        return super(Stack, cls).__new__(cls, tail, head)

    def __repr__(self):
        if self is nil:
            return "< nil >"

        items = []
        current = self
        while current is not nil:
            items.append(repr(current.head))
            current = current.tail
        return "< " + " ".join(reversed(items)) + " >"

    def __bool__(self):
        raise TypeError("Stack truth value is ambiguous; compare with `is nil` or `is not nil`.")

    def pushed(self, *items):
        """Push items in order of tail (left) to head (right) onto new Stack and return."""
        stack = self
        for it in items:
            stack = Stack(stack, it)
        return stack

    def has_depth(self, count: int) -> bool:
        """Check there are at least `count` items, without walking further than needed."""
        stack = self
        for _ in range(count):
            if stack is nil: return False
            stack = stack.tail
        return True

    def depth(self) -> int:
        stack, n = self, 0
        while stack is not nil:
            stack, n = stack.tail, n + 1
        return n


# All checks for empty stack must be done by comparing to this.
nil = Stack(None, None)


# Addresses are indices into one CompiledPhrase, never global.
Address = int


class BranchCondition(Enum):
    ALWAYS = "always"
    IF_ZERO = "ifZero"

    def __str__(self):
        return self.value


def _op(n: int, argument_count: int = 0) -> tuple[int, int]:
    """Opcode value as (integer_value, expected_argument_count) on the argument stack."""
    return (n, argument_count)


class Opcode(IntEnum):
    """Closed set of virtual machine operations, each with the argument count checked before execution."""

    _argument_count: int

    def __new__(cls, int_value: int, argument_count: int = 0) -> 'Opcode':
        obj = int.__new__(cls, int_value)
        obj._value_ = int_value
        obj._argument_count = argument_count
        return obj

    @property
    def argument_count(self) -> int:
        return self._argument_count

    NOP = _op(0, 0)
    ADD = _op(1, 2)
    SUB = _op(2, 2)
    MUL = _op(3, 2)
    DIV = _op(4, 2)
    DOT = _op(5, 1)
    EMIT = _op(6, 1)
    PUSH_CONSTANT = _op(7, 0)
    CALL = _op(8, 0)
    BRANCH = _op(9, 1)                  # Unconditional branches override this with 0.
    DO = _op(10, 2)
    LOOP = _op(11, 0)                   # Checks the control stack instead.
    PUSH_CONTROL_STACK_TOP = _op(12, 0)


_MNEMONICS = {
    Opcode.NOP: 'nop', Opcode.ADD: 'add', Opcode.SUB: 'sub', Opcode.MUL: 'mul', Opcode.DIV: 'div',
    Opcode.DOT: 'dot', Opcode.EMIT: 'emit', Opcode.DO: 'do', Opcode.PUSH_CONTROL_STACK_TOP: 'pushControlStackTop',
}


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    operand: object = None         # int constant, BranchCondition, or CompiledPhrase for CALL.
    target: Address | None = None  # BRANCH and LOOP destination; None while a branch is unresolved.
    name: str | None = None        # Called word, for disassembly.

    @classmethod
    def push(cls, value: int) -> "Instruction":
        return cls(Opcode.PUSH_CONSTANT, operand=value)

    @classmethod
    def call(cls, name: str, phrase: "CompiledPhrase") -> "Instruction":
        return cls(Opcode.CALL, operand=phrase, name=name)

    @classmethod
    def branch(cls, condition: BranchCondition, target: Address | None = None) -> "Instruction":
        return cls(Opcode.BRANCH, operand=condition, target=target)

    @classmethod
    def loop(cls, target: Address) -> "Instruction":
        return cls(Opcode.LOOP, target=target)

    @property
    def is_unresolved_branch(self) -> bool:
        return self.opcode == Opcode.BRANCH and self.target is None

    def resolved(self, target: Address) -> "Instruction":
        return replace(self, target=target)

    @property
    def expected_argument_count(self) -> int:
        if self.opcode == Opcode.BRANCH and self.operand is BranchCondition.ALWAYS:
            return 0
        return self.opcode.argument_count

    def __str__(self):
        match self.opcode:
            case Opcode.PUSH_CONSTANT:
                return f"pushConstant({self.operand})"
            case Opcode.CALL:
                return f"call({self.name})"
            case Opcode.BRANCH:
                return f"branch({self.operand}, {'?' if self.target is None else self.target})"
            case Opcode.LOOP:
                return f"loop({self.target})"
            case _:
                return _MNEMONICS[self.opcode]


@dataclass(frozen=True)
class CompiledPhrase:
    """Well-formed, immutable sequence of instructions; typically one word body or one input line."""
    instructions: tuple[Instruction, ...] = ()

    def __post_init__(self):
        assert not any(insn.is_unresolved_branch for insn in self.instructions), "phrase has unpatched branches"

    def __getitem__(self, address: Address) -> Instruction:
        return self.instructions[address]

    def __len__(self):
        return len(self.instructions)

    def __iter__(self):
        return iter(self.instructions)

    def __str__(self):
        return ''.join(f"{i}:{insn} " for i, insn in enumerate(self.instructions))


class SpecialForm(Enum):
    """Words whose effect happens during compilation, never emitted as a call."""
    COLON = ":"
    SEMICOLON = ";"
    IF = "IF"
    THEN = "THEN"
    ELSE = "ELSE"
    DO = "DO"
    LOOP = "LOOP"


@dataclass(frozen=True)
class Definition:
    name: str
    body: SpecialForm | CompiledPhrase

    @property
    def is_special_form(self) -> bool:
        return isinstance(self.body, SpecialForm)
