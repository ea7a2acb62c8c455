"""Error types for exprmon."""


class ExprmonError(Exception):
    """Base error for exprmon."""
    pass


class ExprError(ExprmonError):
    """Expression could not be evaluated."""
    pass


# ── Lexing ───────────────────────────────────────────────────────────

class LexError(ExprError):
    """Expression text could not be split into tokens."""
    pass


class NoMatchError(LexError):
    """No lexical rule matches at a position.

    Renders as::

        no match at position 2
        1 # 2
          ^
    """

    def __init__(self, text, position):
        self.text = text
        self.position = position
        super().__init__(f"no match at position {position}\n"
                         f"{text}\n{' ' * position}^")


class LexemeTooLongError(LexError):
    """Number or register text exceeds the lexeme capacity."""

    def __init__(self, lexeme, limit):
        self.lexeme = lexeme
        self.limit = limit
        super().__init__(f"lexeme too long ({len(lexeme)} > {limit}): "
                         f"'{lexeme[:16]}...'")


class TooManyTokensError(LexError):
    """Expression has more tokens than the token sequence can hold."""

    def __init__(self, limit):
        self.limit = limit
        super().__init__(f"expression exceeds {limit} tokens")


# ── Evaluation ───────────────────────────────────────────────────────

class EmptyOperandError(ExprError):
    """An operator or bracket pair encloses nothing."""
    pass


class NotANumberError(ExprError):
    """A single-token operand is not a literal or register."""

    def __init__(self, token, index):
        self.token = token
        self.index = index
        super().__init__(f"'{token.text}' at token {index} is not a number")


class NoMainOperatorError(ExprError):
    """No operator at bracket depth 0 to split the expression on."""
    pass


class RegisterLookupError(ExprError):
    """The register resolver does not know a register name."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"unknown register '${name}'")


class DivisionByZeroError(ExprError):
    """Division or remainder by zero."""
    pass


class NestingTooDeepError(ExprError):
    """Expression nesting exceeds the recursion limit."""

    def __init__(self, limit):
        self.limit = limit
        super().__init__(f"expression nested deeper than {limit} levels")
