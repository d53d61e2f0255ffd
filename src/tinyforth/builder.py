## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .types import Address, BranchCondition, CompiledPhrase, Instruction


class PhraseBuilder:
    """Incrementally assembles one phrase, emitting forward branches that get patched later."""

    def __init__(self):
        self.instructions: list[Instruction] = []
        self.forward_branch_count = 0

    @property
    def next_address(self) -> Address:
        return len(self.instructions)

    def append(self, insn: Instruction) -> Address:
        self.instructions.append(insn)
        return len(self.instructions) - 1

    def append_forward_branch(self, condition: BranchCondition) -> Address:
        self.forward_branch_count += 1
        return self.append(Instruction.branch(condition))

    def patch(self, address: Address, target: Address) -> None:
        assert self.forward_branch_count > 0, "unexpected patching"
        insn = self.instructions[address]
        assert insn.is_unresolved_branch, f"patching non-branch instruction `{insn}`"

        self.forward_branch_count -= 1
        self.instructions[address] = insn.resolved(target)

    def finish(self) -> CompiledPhrase:
        """Seal the phrase and start over with an empty one."""
        assert self.forward_branch_count == 0, "phrase has unpatched instructions"
        phrase = CompiledPhrase(tuple(self.instructions))
        self.instructions = []
        return phrase

    def __len__(self):
        return len(self.instructions)
