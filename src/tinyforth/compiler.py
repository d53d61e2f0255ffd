## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
from enum import Enum

from .types import CompiledPhrase, Instruction, SpecialForm
from .errors import ForthCompileError, ForthNameError, ForthSyntaxError
from .parser import tokenize, parse_integer
from .builder import PhraseBuilder
from .control import ConditionalHelper, LoopHelper
from .dictionary import Dictionary
from .builtins import load_builtins_dictionary


class DefinitionState(Enum):
    NONE = "none"
    WAITING_NAME = "waitingName"
    COMPILING_BODY = "compilingBody"


class Compiler:
    """Turns source lines into compiled phrases, registering `:` definitions in the dictionary.

    A phrase may span several lines while a definition, IF or DO is still open; any error throws away
    everything accumulated so far, including earlier lines of the open definition.
    """

    def __init__(self, dictionary: Dictionary | None = None, verbosity: int = 0, trace_file=None):
        self.dictionary = load_builtins_dictionary() if dictionary is None else dictionary
        self.verbosity = verbosity
        self.trace_file = trace_file
        self.reset()

    def reset(self) -> None:
        self.state = DefinitionState.NONE
        self.name: str | None = None
        self.builder = PhraseBuilder()
        self.conditionals = ConditionalHelper(self.builder)
        self.loops = LoopHelper(self.builder)

    @property
    def is_defining(self) -> bool:
        return self.state is not DefinitionState.NONE

    @property
    def is_compiling(self) -> bool:
        return self.is_defining or self.conditionals.is_compiling or self.loops.is_compiling

    def compile(self, source: str) -> CompiledPhrase:
        """Compile one line; returns an empty phrase while more input is needed to complete it."""
        try:
            for token in tokenize(source):
                if self.verbosity > 1: self._trace(token)
                if self.state is DefinitionState.WAITING_NAME:
                    self._accept_name(token)
                else:
                    self.compile_token(token)
        except ForthCompileError:
            self.reset()
            raise

        return CompiledPhrase() if self.is_compiling else self.builder.finish()

    def compile_token(self, token: str) -> None:
        if (value := parse_integer(token)) is not None:
            self.builder.append(Instruction.push(value))
        elif (definition := self.dictionary.lookup(token)) is None:
            raise ForthNameError(f"unknown word {token}", forth_token=token)
        elif definition.is_special_form:
            self._compile_special_form(definition.body)
        else:
            self.builder.append(Instruction.call(token, definition.body))

    def _accept_name(self, token: str) -> None:
        if parse_integer(token) is not None or self.dictionary.is_special_form(token):
            raise ForthSyntaxError(f"word expected after ':' (parsed {token})", forth_token=token)
        self.state, self.name = DefinitionState.COMPILING_BODY, token

    def _compile_special_form(self, form: SpecialForm) -> None:
        match form:
            case SpecialForm.COLON:
                self.state = DefinitionState.WAITING_NAME
            case SpecialForm.SEMICOLON:
                self._end_definition()
            case SpecialForm.IF:
                self.conditionals.on_if()
            case SpecialForm.ELSE:
                self.conditionals.on_else()
            case SpecialForm.THEN:
                self.conditionals.on_then()
            case SpecialForm.DO:
                self.loops.on_do()
            case SpecialForm.LOOP:
                self.loops.on_loop()

    def _end_definition(self) -> None:
        if self.state is not DefinitionState.COMPILING_BODY:
            raise ForthSyntaxError("unexpected ;", forth_token=";")
        if self.conditionals.is_compiling:
            raise ForthSyntaxError("unterminated IF in definition", forth_token=self.name)
        if self.loops.is_compiling:
            raise ForthSyntaxError("unterminated DO in definition", forth_token=self.name)

        self.dictionary.define(self.name, self.builder.finish())
        self.state, self.name = DefinitionState.NONE, None

    def describe_state(self) -> str:
        if self.state is DefinitionState.COMPILING_BODY:
            return f"{self.state.value}({self.name})"
        return self.state.value

    def _trace(self, token: str) -> None:
        file = self.trace_file or sys.stderr
        print(f"\033[90m  ~ :\033[0m  {token:<16} \033[36m{self.describe_state()}\033[0m", file=file)
