"""Expression tokenizer.

Splits monitor expressions into tokens with a fixed, ordered list of
regex rules. At each position the *first* rule that matches there wins,
not the longest one, so rule order decides between ambiguous prefixes:
hex (``0x1f``) is tried before decimal, otherwise ``0x1f`` would lex as
``0`` followed by garbage.

Token kinds::

    DEC  HEX  REG          operands (lexeme kept in Token.text)
    + - * / %              arithmetic
    == != && ||            comparison / logical
    ( )                    grouping
"""

import enum
import logging
import re

from .errors import NoMatchError, LexemeTooLongError, TooManyTokensError

logger = logging.getLogger(__name__)

MAX_TOKENS = 4096     # token sequence capacity
MAX_LEXEME = 31       # longest number/register text


class TokenKind(enum.Enum):
    DEC = 'dec'
    HEX = 'hex'
    REG = 'reg'
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'
    MOD = '%'
    EQ = '=='
    NEQ = '!='
    AND = '&&'
    OR = '||'
    LPAREN = '('
    RPAREN = ')'

    @property
    def is_operand(self):
        return self in _OPERANDS

    @property
    def is_operator(self):
        return self not in _OPERANDS and self not in _BRACKETS


_OPERANDS = frozenset((TokenKind.DEC, TokenKind.HEX, TokenKind.REG))
_BRACKETS = frozenset((TokenKind.LPAREN, TokenKind.RPAREN))


class Token:
    """Immutable lexical unit.

    ``text`` is the matched lexeme for operands and the operator
    spelling for everything else.
    """
    __slots__ = ('_kind', '_text')

    def __init__(self, kind, text=None):
        object.__setattr__(self, '_kind', kind)
        object.__setattr__(self, '_text', kind.value if text is None else text)

    def __setattr__(self, name, value):
        raise AttributeError("Token is immutable")

    @property
    def kind(self):
        return self._kind

    @property
    def text(self):
        return self._text

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self._kind is other._kind and self._text == other._text

    def __hash__(self):
        return hash((self._kind, self._text))

    def __repr__(self):
        return f"Token({self._kind.name}, {self._text!r})"


# ── Rules ─────────────────────────────────────────────────────────────
# Kind None = skip (whitespace). Order matters, see module docstring.

RULES = [(re.compile(pattern), kind) for pattern, kind in (
    (r'[ \t]+',               None),
    (r'\+',                   TokenKind.ADD),
    (r'-',                    TokenKind.SUB),
    (r'\*',                   TokenKind.MUL),
    (r'/',                    TokenKind.DIV),
    (r'%',                    TokenKind.MOD),
    (r'\(',                   TokenKind.LPAREN),
    (r'\)',                   TokenKind.RPAREN),
    (r'==',                   TokenKind.EQ),
    (r'!=',                   TokenKind.NEQ),
    (r'&&',                   TokenKind.AND),
    (r'\|\|',                 TokenKind.OR),
    (r'0x[0-9a-fA-F]{1,8}',   TokenKind.HEX),
    (r'[0-9]+u?',             TokenKind.DEC),
    (r'\$[A-Za-z0-9]+',       TokenKind.REG),
)]


def tokenize(text, max_tokens=MAX_TOKENS):
    """Split *text* into a fresh token list.

    Args:
        text:       Expression, e.g. ``"$pc + 0x10 * (2 - $a0)"``.
        max_tokens: Capacity of the token sequence.

    Returns:
        ``list[Token]`` (empty for blank input).

    Raises:
        NoMatchError when no rule matches at some position.
        LexemeTooLongError for number/register text over MAX_LEXEME chars.
        TooManyTokensError when the sequence would exceed *max_tokens*.
    """
    tokens = []
    pos = 0
    n = len(text)
    while pos < n:
        for i, (rx, kind) in enumerate(RULES):
            m = rx.match(text, pos)
            if m:
                break
        else:
            raise NoMatchError(text, pos)

        lexeme = m.group()
        logger.debug("match rule[%d] = %r at position %d with len %d: %s",
                     i, rx.pattern, pos, len(lexeme), lexeme)
        pos = m.end()

        if kind is None:
            continue
        if kind.is_operand:
            if len(lexeme) > MAX_LEXEME:
                raise LexemeTooLongError(lexeme, MAX_LEXEME)
            tok = Token(kind, lexeme)
        else:
            tok = Token(kind)
        if len(tokens) >= max_tokens:
            raise TooManyTokensError(max_tokens)
        tokens.append(tok)

    return tokens


def format_tokens(tokens, start=0, end=None):
    """Render ``tokens[start..end]`` (inclusive) as compact text."""
    if end is None:
        end = len(tokens) - 1
    return ''.join(t.text for t in tokens[start:end + 1])
