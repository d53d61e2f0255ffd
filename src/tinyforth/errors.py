## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘


class ForthError(Exception):
    def __init__(self, message: str = "", *, forth_token=None, forth_insn=None):
        """Base class for all Forth-raised errors, compile-time or run-time."""
        super().__init__(message)
        self.forth_token: str = forth_token
        self.forth_insn: object = forth_insn


class ForthCompileError(ForthError):
    pass

class ForthNameError(ForthCompileError, NameError):
    pass

class ForthSyntaxError(ForthCompileError, ValueError):
    """Malformed definitions and unbalanced control structures."""
    pass


class ForthRuntimeError(ForthError, RuntimeError):
    pass

class ForthStackError(ForthRuntimeError):
    """Not enough items on the argument stack or the control stack."""
    def __init__(self, message: str = "", *, forth_token=None, forth_insn=None, expected=None, actual=None):
        super().__init__(message, forth_token=forth_token, forth_insn=forth_insn)
        self.expected = expected
        self.actual = actual

class ForthZeroDivisionError(ForthRuntimeError, ZeroDivisionError):
    pass

class ForthValueError(ForthRuntimeError, ValueError):
    pass
