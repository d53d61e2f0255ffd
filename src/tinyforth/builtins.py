## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .types import Instruction, Opcode, SpecialForm
from .dictionary import Dictionary


# Words compiling down to a single opcode.
PRIMITIVES = {
    '+': Opcode.ADD,
    '-': Opcode.SUB,
    '*': Opcode.MUL,
    '/': Opcode.DIV,
    '.': Opcode.DOT,
    'EMIT': Opcode.EMIT,
    'I': Opcode.PUSH_CONTROL_STACK_TOP,
}

# Words implemented in Forth itself, compiled through the evaluator at startup.
BOOTSTRAP = (
    ": CR 13 EMIT ;",
)


def load_builtins_dictionary() -> Dictionary:
    dictionary = Dictionary()

    for name, opcode in PRIMITIVES.items():
        dictionary.define_phrase(name, Instruction(opcode))

    for form in SpecialForm:
        dictionary.define_special_form(form)

    return dictionary
