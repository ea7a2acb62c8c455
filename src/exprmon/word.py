"""Machine-word arithmetic for the simulated ISA.

All literals, register values and results are unsigned words of a fixed
width (``word_t``): 32 bits by default, 64 for 64-bit targets. Arithmetic
wraps around; there is no overflow error.
"""

import numpy as np

from .errors import DivisionByZeroError

WORD_BITS = 32        # word_t width of the simulated ISA

_DTYPES = {
    32: np.uint32,
    64: np.uint64,
}


def word_dtype(bits: int = WORD_BITS):
    """numpy dtype holding one machine word of *bits* width."""
    try:
        return _DTYPES[bits]
    except KeyError:
        raise ValueError(f"unsupported word size: {bits} bits "
                         f"(expected one of {sorted(_DTYPES)})") from None


def word_mask(bits: int = WORD_BITS) -> int:
    word_dtype(bits)
    return (1 << bits) - 1


def to_word(value: int, bits: int = WORD_BITS) -> int:
    """Reduce any Python int to a machine word (modulo 2**bits)."""
    return int(value) & word_mask(bits)


def _add(a, b): return a + b
def _sub(a, b): return a - b
def _mul(a, b): return a * b


def _div(a, b):
    if b == 0:
        raise DivisionByZeroError("division by zero")
    return a // b


def _mod(a, b):
    if b == 0:
        raise DivisionByZeroError("remainder by zero")
    return a % b


def _eq(a, b):  return int(a == b)
def _neq(a, b): return int(a != b)
def _and(a, b): return int(bool(a) and bool(b))
def _or(a, b):  return int(bool(a) or bool(b))


OPERATORS = {
    '+':  _add,
    '-':  _sub,
    '*':  _mul,
    '/':  _div,
    '%':  _mod,
    '==': _eq,
    '!=': _neq,
    '&&': _and,
    '||': _or,
}


def apply_operator(op: str, lhs: int, rhs: int, bits: int = WORD_BITS) -> int:
    """Apply binary operator *op* to two machine words.

    Both operands are already evaluated; ``&&`` and ``||`` only combine
    the two values, they do not short-circuit anything.

    Args:
        op:   Operator spelling, one of :data:`OPERATORS`.
        lhs:  Left operand.
        rhs:  Right operand.
        bits: Word width.

    Returns:
        Result as a plain ``int`` in ``[0, 2**bits)``.

    Raises:
        DivisionByZeroError for ``/`` or ``%`` with a zero right operand.
        ValueError for an unknown operator.
    """
    fn = OPERATORS.get(op)
    if fn is None:
        raise ValueError(f"unknown operator '{op}'")
    dt = word_dtype(bits)
    a = dt(to_word(lhs, bits))
    b = dt(to_word(rhs, bits))
    with np.errstate(over='ignore'):
        return to_word(fn(a, b), bits)
