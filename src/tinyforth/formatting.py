## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re

from .types import Stack, nil, CompiledPhrase, Instruction


def stack_to_list(stk: Stack) -> list:
    """Items from the top of the stack downwards."""
    result = []
    while stk is not nil:
        stk, head = stk
        result.append(head)
    return result


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*m')
    return lambda text: write_fn(ansi_re.sub('', text))


def format_stack(stack: Stack) -> str:
    """Bottom to top, each item followed by a space, e.g. `1 2 3 `."""
    return ''.join(f"{item} " for item in reversed(stack_to_list(stack)))

def format_prompt(stack: Stack) -> str:
    return f"[ {format_stack(stack)}]"

def format_phrase(phrase: CompiledPhrase, indent: int = 4) -> str:
    """Multi-line listing with one addressed instruction per line."""
    return '\n'.join(f"{' ' * indent}{i:>3}: {insn}" for i, insn in enumerate(phrase))


def show_stack(stack: Stack, width=48, end='\n', file=None):
    stack_str = '∅' if stack is nil else format_stack(stack).rstrip()
    if width is not None and len(stack_str) > width:
        stack_str = '… ' + stack_str[-width+2:]
    print(f"{stack_str:>{width}}" if width else stack_str, end=end, file=file)

def show_instruction_and_stack(step: int, depth: int, insn: Instruction | None, stack: Stack, file=None):
    """One trace line; `insn` is None once the phrase has finished."""
    print(f"\033[90m{step:>3} :\033[0m  ", end='', file=file)
    show_stack(stack, end='', file=file)
    print(f" \033[36m <=> \033[0m {'  ' * depth}{'' if insn is None else insn}", file=file)
