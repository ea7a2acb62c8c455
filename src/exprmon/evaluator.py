"""Recursive token-range evaluator.

An expression is evaluated over an inclusive range ``[start, end]`` of
one token list, without copying tokens:

  1. **Single token** → literal value or register lookup.
  2. **Fully parenthesized** ``( ... )`` → evaluate the inside.
  3. Otherwise split at the **main operator** (loosest binding operator at
     bracket depth 0, rightmost on ties) and evaluate both sides.

Splitting at the *rightmost* loosest operator gives left associativity:
``5-3-1`` splits at the second ``-`` into ``(5-3) - 1``.

Both sides of every operator are evaluated before the operator is
applied, so ``&&`` and ``||`` do not short-circuit: ``0 && $pc`` still
looks up ``$pc``.
"""

import logging
from typing import NamedTuple, Optional

from .errors import (ExprError, EmptyOperandError, NotANumberError,
                     NoMainOperatorError, RegisterLookupError,
                     NestingTooDeepError)
from .lexer import TokenKind, tokenize, format_tokens, MAX_TOKENS
from .word import WORD_BITS, to_word, apply_operator

logger = logging.getLogger(__name__)

MAX_DEPTH = 512       # recursion limit for nested sub-expressions

# Smaller class = tighter binding.
PRECEDENCE = {
    TokenKind.MUL: 1,
    TokenKind.DIV: 1,
    TokenKind.MOD: 1,
    TokenKind.ADD: 2,
    TokenKind.SUB: 2,
    TokenKind.EQ:  3,
    TokenKind.NEQ: 3,
    TokenKind.AND: 4,
    TokenKind.OR:  4,
}


class EvalResult(NamedTuple):
    """Outcome of :func:`evaluate_expression`.

    ``value`` is meaningful only when ``ok`` is true; ``error`` holds the
    failure otherwise.
    """
    value: int
    ok: bool
    error: Optional[ExprError] = None


# ══════════════════════════════════════════════════════════════════════
# RANGE ANALYSIS
# ══════════════════════════════════════════════════════════════════════

def is_fully_parenthesized(tokens, start, end):
    """Is ``tokens[start..end]`` one balanced ``( ... )`` pair?

    ``(1+2)`` → True, ``(1)+(2)`` → False: the boundary tokens are
    brackets, but they do not pair with each other.
    """
    if tokens[start].kind is not TokenKind.LPAREN:
        return False
    if tokens[end].kind is not TokenKind.RPAREN:
        return False
    depth = 0
    for i in range(start + 1, end):
        kind = tokens[i].kind
        if kind is TokenKind.LPAREN:
            depth += 1
        elif kind is TokenKind.RPAREN:
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def find_main_operator(tokens, start, end):
    """Index of the operator to split ``tokens[start..end]`` on.

    Only operators at bracket depth 0 are candidates. The loosest binding
    one wins; among equals the later index wins (``>=``), which is what
    makes evaluation left-associative.

    Returns:
        Token index, or ``None`` when there is no candidate or a ``)``
        closes a bracket that was never opened inside the range.
    """
    best = None
    best_prec = 0
    depth = 0
    for i in range(start, end + 1):
        kind = tokens[i].kind
        if kind is TokenKind.LPAREN:
            depth += 1
        elif kind is TokenKind.RPAREN:
            depth -= 1
            if depth < 0:
                return None
        elif kind.is_operator and depth == 0:
            prec = PRECEDENCE[kind]
            if prec >= best_prec:
                best = i
                best_prec = prec
    return best


# ══════════════════════════════════════════════════════════════════════
# EVALUATOR
# ══════════════════════════════════════════════════════════════════════

def parse_literal(text, bits=WORD_BITS):
    """Value of a DEC/HEX lexeme: ``0x`` prefix → base 16, else base 10.

    A trailing ``u`` (unsigned suffix) is accepted and ignored.
    """
    if text[:2] in ('0x', '0X'):
        return to_word(int(text[2:], 16), bits)
    return to_word(int(text.rstrip('uU'), 10), bits)


class Evaluator:
    """Evaluates token ranges against one register resolver.

    Args:
        resolve_register: ``name -> (value, ok)``; ``name`` has no ``$``.
                          ``None`` makes every register reference fail.
        bits:             Machine word width.
        max_depth:        Nesting limit; deeper input fails cleanly.
    """

    def __init__(self, resolve_register=None, bits=WORD_BITS,
                 max_depth=MAX_DEPTH):
        self.resolve_register = resolve_register
        self.bits = bits
        self.max_depth = max_depth

    def eval_range(self, tokens, start, end, depth=0):
        """Evaluate ``tokens[start..end]`` (inclusive).

        Raises:
            ExprError subclass on any failure; nothing is computed past
            the first failing sub-expression.
        """
        if depth > self.max_depth:
            raise NestingTooDeepError(self.max_depth)

        # Walk the left spine without recursing: ``1-2-3`` queues ``-3``
        # then ``-2`` and continues with ``1``. Only brackets and right
        # operands add depth.
        pending = []            # [(operator index, right operand end)]
        while True:
            if start > end:
                raise EmptyOperandError(
                    f"empty operand at token {start}" if tokens
                    else "empty expression")
            if start == end:
                value = self._operand(tokens[start], start)
                break
            if is_fully_parenthesized(tokens, start, end):
                value = self.eval_range(tokens, start + 1, end - 1, depth + 1)
                break
            op = find_main_operator(tokens, start, end)
            if op is None:
                raise NoMainOperatorError(
                    f"no main operator in '{format_tokens(tokens, start, end)}'")
            pending.append((op, end))
            end = op - 1
        self._trace(tokens, start, end, value)

        for op, end in reversed(pending):
            rhs = self.eval_range(tokens, op + 1, end, depth + 1)
            value = apply_operator(tokens[op].text, value, rhs, self.bits)
            self._trace(tokens, start, end, value)
        return value

    @staticmethod
    def _trace(tokens, start, end, value):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s = %d", format_tokens(tokens, start, end), value)

    def _operand(self, tok, index):
        kind = tok.kind
        if kind is TokenKind.DEC or kind is TokenKind.HEX:
            return parse_literal(tok.text, self.bits)
        if kind is TokenKind.REG:
            name = tok.text[1:]
            if self.resolve_register is None:
                raise RegisterLookupError(name)
            value, ok = self.resolve_register(name)
            if not ok:
                raise RegisterLookupError(name)
            return to_word(value, self.bits)
        raise NotANumberError(tok, index)


# ══════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════

def evaluate(text, resolve_register=None, bits=WORD_BITS,
             max_depth=MAX_DEPTH, max_tokens=MAX_TOKENS):
    """Evaluate an expression string to a machine word.

    Args:
        text:             Expression, e.g. ``"$sp + 4 * (2 - 1)"``.
        resolve_register: ``name -> (value, ok)`` register lookup.
        bits:             Machine word width (32 or 64).
        max_depth:        Nesting limit.
        max_tokens:       Token sequence capacity.

    Returns:
        Integer value in ``[0, 2**bits)``.

    Raises:
        ExprError on lexing or evaluation failure.
    """
    tokens = tokenize(text, max_tokens)
    ev = Evaluator(resolve_register, bits, max_depth)
    return ev.eval_range(tokens, 0, len(tokens) - 1)


def evaluate_expression(text, resolve_register, bits=WORD_BITS):
    """Monitor entry point: evaluate *text*, never raising ExprError.

    Returns:
        :class:`EvalResult`; on failure ``ok`` is false and ``value``
        must not be used.
    """
    try:
        return EvalResult(evaluate(text, resolve_register, bits), True)
    except ExprError as e:
        logger.debug("evaluation of %r failed: %s", text, e)
        return EvalResult(0, False, e)
