## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Callable

from .types import CompiledPhrase, Stack
from .errors import ForthError, ForthNameError, ForthRuntimeError
from .compiler import Compiler
from .dictionary import Dictionary
from .interpreter import VM
from .builtins import load_builtins_dictionary, BOOTSTRAP
from .formatting import format_phrase, stack_to_list as _stack_to_list


ErrorHandler = Callable[[str], None]


def discard_error(message: str) -> None:
    """Default error handler, for hosts that only care about the success flag."""


class Evaluator:
    """One Forth session: a dictionary and stacks that persist across `evaluate` calls.

    Each line is fully compiled, then fully executed.  Failures never escape as exceptions; they are
    reported once through the error handler and leave the session in a clean state for the next line.
    """

    def __init__(self, error_handler: ErrorHandler | None = None, dictionary: Dictionary | None = None,
                 verbosity: int = 0, trace_file=None, stats: dict | None = None):
        self.error_handler: ErrorHandler = error_handler or discard_error
        self.dictionary = load_builtins_dictionary() if dictionary is None else dictionary
        self.compiler = Compiler(self.dictionary, verbosity=verbosity, trace_file=trace_file)
        self.vm = VM(verbosity=verbosity, trace_file=trace_file, stats=stats)

        for source in BOOTSTRAP:
            self._evaluate_or_die(source)

    def _evaluate_or_die(self, source: str) -> None:
        if not self.evaluate(source):
            raise ForthRuntimeError(f"failed to evaluate '{source}'", forth_token=source)

    def set_error_handler(self, handler: ErrorHandler) -> None:
        self.error_handler = handler

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def evaluate(self, source: str) -> bool:
        """Compile then run one input line, returning whether it succeeded."""
        try:
            phrase = self.compiler.compile(source)
            self.vm.execute_phrase(phrase)
        except ForthError as exc:
            self.error_handler(str(exc))
            return False
        return True

    def compile(self, source: str) -> CompiledPhrase:
        return self.compiler.compile(source)

    @property
    def is_compiling(self) -> bool:
        return self.compiler.is_compiling

    # Output and state ────────────────────────────────────────────────────────────────────────
    def read_and_reset_output(self) -> str:
        output, self.vm.output = self.vm.output, ""
        return output

    @property
    def stack(self) -> Stack:
        return self.vm.stack

    def from_stack(self, stack: Stack | None = None) -> list:
        """Stack items as a list, top first."""
        return list(_stack_to_list(self.vm.stack if stack is None else stack))

    # Introspection ───────────────────────────────────────────────────────────────────────────
    def disassemble(self, name: str) -> str:
        definition = self.dictionary.lookup(name)
        if definition is None or definition.is_special_form:
            raise ForthNameError(f"no compiled phrase for word {name}", forth_token=name)
        return format_phrase(definition.body)

    def list_words(self) -> list[str]:
        return self.dictionary.names()
