"""exprmon: expression evaluator for a hardware simulator's debug monitor.

Evaluates monitor expressions such as ``$sp + 4 * (2 - 1)`` or
``$a0 == 0x10 && $pc != 0`` to a single unsigned machine word:

  - Decimal (``42``, ``42u``) and hex (``0x2a``) literals
  - Register references (``$pc``, ``$sp``, ``$a0``) via a resolver
  - ``* / %`` bind tighter than ``+ -``, then ``== !=``, then ``&& ||``
  - All operators are left-associative; ``&&``/``||`` evaluate both sides
  - Wraparound arithmetic on 32-bit (default) or 64-bit words

Usage as library:
    from exprmon import evaluate_expression, RegisterFile
    regs = RegisterFile()
    regs.set('sp', 0x80001000)
    result = evaluate_expression('$sp - 16', regs)
    if result.ok:
        print(hex(result.value))

Usage from command line:
    exprmon eval '$sp - 16' -r sp=0x80001000
"""

__version__ = '1.0.0'

from .errors import ExprmonError, ExprError, LexError
from .evaluator import EvalResult, Evaluator, evaluate, evaluate_expression
from .lexer import Token, TokenKind, tokenize
from .registers import RegisterFile

__all__ = [
    'ExprmonError', 'ExprError', 'LexError',
    'EvalResult', 'Evaluator', 'evaluate', 'evaluate_expression',
    'Token', 'TokenKind', 'tokenize',
    'RegisterFile',
]
