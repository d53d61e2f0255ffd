## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re

import lark


GRAMMAR = r"""start: WORD*

WORD: /\S+/
WS: /\s+/

%ignore WS
"""

# Decimal only, optional leading minus; bare `+` and `-` never match so they stay words.
INTEGER = re.compile(r'-?[0-9]+')

# Machine integers are signed 64-bit; wider literals are not numbers.
INT_MIN, INT_MAX = -2**63, 2**63 - 1

_PARSER = None


def _get_parser() -> lark.Lark:
    global _PARSER
    if _PARSER is None:
        _PARSER = lark.Lark(GRAMMAR, start='start', parser='lalr', lexer='contextual')
    return _PARSER


def tokenize(text: str) -> list[str]:
    """Split source into blank-separated words; never yields empty tokens."""
    tree = _get_parser().parse(text)
    return [str(tok) for tok in tree.children]


def parse_integer(token: str) -> int | None:
    if INTEGER.fullmatch(token) is None:
        return None
    value = int(token)
    return value if INT_MIN <= value <= INT_MAX else None
