## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# Compile-time bookkeeping for nested control structures, one helper per construct so each keeps its
# own balancing rules.  Both only ever touch the shared PhraseBuilder.
#

from .types import Address, BranchCondition, Instruction, Opcode
from .errors import ForthSyntaxError
from .builder import PhraseBuilder


class ConditionalHelper:
    """Pending branch addresses of nested IF / ELSE, patched once the matching ELSE / THEN shows up."""

    def __init__(self, builder: PhraseBuilder):
        self.builder = builder
        self.pending: list[Address] = []

    @property
    def is_compiling(self) -> bool:
        return len(self.pending) > 0

    def on_if(self) -> None:
        self.pending.append(self.builder.append_forward_branch(BranchCondition.IF_ZERO))

    def on_else(self) -> None:
        if not self.pending:
            raise ForthSyntaxError("ELSE without IF", forth_token="ELSE")
        if_address = self.pending.pop()
        else_address = self.builder.append_forward_branch(BranchCondition.ALWAYS)
        self.builder.patch(if_address, self.builder.next_address)
        self.pending.append(else_address)

    def on_then(self) -> None:
        if not self.pending:
            raise ForthSyntaxError("THEN without IF", forth_token="THEN")
        # Ensure there is an instruction at the jump target, even at the end of a phrase.
        target = self.builder.append(Instruction(Opcode.NOP))
        self.builder.patch(self.pending.pop(), target)


class LoopHelper:
    """Body-start addresses of nested DO, used as the back-edge of the matching LOOP."""

    def __init__(self, builder: PhraseBuilder):
        self.builder = builder
        self.pending: list[Address] = []

    @property
    def is_compiling(self) -> bool:
        return len(self.pending) > 0

    def on_do(self) -> None:
        self.builder.append(Instruction(Opcode.DO))
        self.pending.append(self.builder.next_address)

    def on_loop(self) -> None:
        if not self.pending:
            raise ForthSyntaxError("LOOP without DO", forth_token="LOOP")
        self.builder.append(Instruction.loop(self.pending.pop()))
