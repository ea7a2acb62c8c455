"""Random expression generator for differential testing.

Produces ``(expected, expression)`` cases: random unsigned arithmetic such
as ``1804289383u * ( 846930886u - 1681692777u )``, paired with the value a
C compiler would compute for ``unsigned result = <expression>;``.

The expected value comes from a small precedence-climbing parser over
the generated text, not from the token-range evaluator, so the two can be
checked against each other. Cases that divide by zero are thrown away
and regenerated.

Line format (one case per line, as read by ``exprmon check``)::

    <expected> <expression>
"""

import re

import numpy as np

from .errors import DivisionByZeroError
from .word import WORD_BITS, apply_operator

MAX_EXPR_LEN = 4096   # generation buffer size; literals only past 1/10 of it
MAX_ATTEMPTS = 1000   # regenerations per case before giving up

# Weighted: + - * twice as likely as /.
GEN_OPS = ('+', '-', '*', '+', '-', '*', '/')

# C binding strength (higher = tighter). && and || are absent on purpose:
# C ranks && above ||, the monitor ranks them equal.
C_PRECEDENCE = {
    '==': 1, '!=': 1,
    '+':  2, '-':  2,
    '*':  3, '/':  3, '%': 3,
}

_RE_TOKEN = re.compile(r'\s*(0x[0-9a-fA-F]+|\d+u?|==|!=|[-+*/%()])')


# ══════════════════════════════════════════════════════════════════════
# C-SEMANTICS ORACLE
# ══════════════════════════════════════════════════════════════════════

def _scan(text):
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _RE_TOKEN.match(text, pos)
        if not m:
            raise ValueError(f"Unexpected character '{text[pos]}' "
                             f"in expression '{text}'")
        tokens.append(m.group(1))
        pos = m.end()
    return tokens


def _parse_atom(tokens, bits):
    if not tokens:
        raise ValueError("Unexpected end of expression")
    tok = tokens.pop(0)
    if tok == '(':
        value = _parse_binary(tokens, bits, 0)
        if not tokens or tokens.pop(0) != ')':
            raise ValueError("Missing closing parenthesis")
        return value
    if tok[0].isdigit():
        if tok.startswith('0x'):
            return int(tok, 16) & ((1 << bits) - 1)
        return int(tok.rstrip('u')) & ((1 << bits) - 1)
    raise ValueError(f"Unexpected token: '{tok}'")


def _parse_binary(tokens, bits, min_prec):
    """Precedence climbing, left-associative at every level."""
    left = _parse_atom(tokens, bits)
    while tokens and tokens[0] in C_PRECEDENCE:
        op = tokens[0]
        prec = C_PRECEDENCE[op]
        if prec < min_prec:
            break
        tokens.pop(0)
        right = _parse_binary(tokens, bits, prec + 1)
        left = apply_operator(op, left, right, bits)
    return left


def c_evaluate(text, bits=WORD_BITS):
    """Value of *text* under C rules for unsigned operands.

    Raises:
        DivisionByZeroError when the expression divides by zero.
        ValueError on text outside the generated grammar.
    """
    tokens = _scan(text)
    value = _parse_binary(tokens, bits, 0)
    if tokens:
        raise ValueError(f"Trailing tokens in expression: {' '.join(tokens)}")
    return value


# ══════════════════════════════════════════════════════════════════════
# GENERATOR
# ══════════════════════════════════════════════════════════════════════

class ExprGenerator:
    """Random unsigned expression generator.

    Args:
        seed:    Seed for ``numpy.random.RandomState`` (None = fresh entropy).
        max_len: Buffer size; past one tenth of it only literals are added.
        ops:     Operator pool, repeated entries weight the choice.
        bits:    Word width for literals and expected values.
    """

    def __init__(self, seed=None, max_len=MAX_EXPR_LEN, ops=GEN_OPS,
                 bits=WORD_BITS):
        bad = [op for op in ops if op not in C_PRECEDENCE]
        if bad:
            raise ValueError(f"Unsupported generator operator(s): {bad}")
        self.rng = np.random.RandomState(seed)
        self.max_len = max_len
        self.ops = tuple(ops)
        self.bits = bits

    def _literal(self):
        return int(self.rng.randint(0, 1 << self.bits, dtype=np.uint64))

    def _gen(self, buf):
        choose = self.rng.randint(4)
        if sum(map(len, buf)) > self.max_len // 10:
            choose = 0

        if choose == 0:
            buf.append(f"{self._literal()}u")
        elif choose == 1:
            buf.append(" ( ")
            self._gen(buf)
            buf.append(" ) ")
        else:
            self._gen(buf)
            buf.append(f" {self.ops[self.rng.randint(len(self.ops))]} ")
            self._gen(buf)

    def expression(self):
        """One random expression string (may divide by zero)."""
        buf = []
        self._gen(buf)
        return ''.join(buf)

    def generate(self):
        """One ``(expected, expression)`` case.

        Raises:
            RuntimeError if MAX_ATTEMPTS expressions in a row divide by zero.
        """
        for _ in range(MAX_ATTEMPTS):
            text = self.expression()
            try:
                return c_evaluate(text, self.bits), text
            except DivisionByZeroError:
                continue
        raise RuntimeError(f"No valid expression after {MAX_ATTEMPTS} attempts")

    def cases(self, n):
        """Yield *n* generated cases."""
        for _ in range(n):
            yield self.generate()


def format_case(expected, text):
    return f"{expected} {text}"


def parse_case(line):
    """Split ``"<expected> <expression>"`` into ``(int, str)``.

    Raises:
        ValueError on a malformed line.
    """
    head, _, text = line.strip().partition(' ')
    if not head or not text.strip():
        raise ValueError(f"Malformed case line: '{line.strip()}'")
    return int(head), text.strip()
