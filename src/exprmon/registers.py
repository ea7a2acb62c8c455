"""Simulated register file: the register resolver for expressions.

Names follow the RISC-V ABI (``$0``, ``ra``, ``sp``, ... ``t6``) plus
``pc``. Expressions refer to them with a ``$`` sigil; the evaluator strips
it, so the resolver sees ``sp`` for ``$sp`` and ``0`` for ``$0``.
Architectural aliases ``x0`` … ``x31`` resolve to the same registers.
"""

from .evaluator import parse_literal
from .word import WORD_BITS, to_word

RISCV32_REGS = (
    '$0', 'ra', 'sp', 'gp', 'tp', 't0', 't1', 't2',
    's0', 's1', 'a0', 'a1', 'a2', 'a3', 'a4', 'a5',
    'a6', 'a7', 's2', 's3', 's4', 's5', 's6', 's7',
    's8', 's9', 's10', 's11', 't3', 't4', 't5', 't6',
)


class RegisterFile:
    """General-purpose registers plus ``pc``, all reset to 0.

    Instances are callable resolvers: ``regs('sp') -> (value, ok)``.
    """

    def __init__(self, names=RISCV32_REGS, bits=WORD_BITS):
        self.bits = bits
        self.names = tuple(names) + ('pc',)
        self._values = dict.fromkeys(self.names, 0)
        self._alias = {}
        for i, name in enumerate(names):
            self._alias[f'x{i}'] = name
            if name.startswith('$'):
                self._alias[name[1:]] = name

    def _canonical(self, name):
        if name in self._values:
            return name
        return self._alias.get(name)

    def __contains__(self, name):
        return self._canonical(name) is not None

    def resolve(self, name):
        """Look up *name* (no ``$`` sigil). Returns ``(value, ok)``."""
        key = self._canonical(name)
        if key is None:
            return 0, False
        return self._values[key], True

    __call__ = resolve

    def get(self, name):
        key = self._canonical(name)
        if key is None:
            raise KeyError(name)
        return self._values[key]

    def set(self, name, value):
        key = self._canonical(name)
        if key is None:
            raise KeyError(name)
        # x0 is hardwired to zero
        if key != '$0':
            self._values[key] = to_word(value, self.bits)

    def dump(self):
        """``[(name, value), ...]`` in architectural order."""
        return [(name, self._values[name]) for name in self.names]


def parse_assignments(items, bits=WORD_BITS):
    """Parse ``["a0=5", "pc=0x80000000"]`` into ``[(name, value), ...]``.

    Values use the literal syntax of expressions: decimal with an optional
    ``u`` suffix (``010`` is ten) or ``0x`` hex, wrapped to *bits*.
    A leading ``$`` on the name is accepted.

    Raises:
        ValueError on a malformed item.
    """
    out = []
    for item in items:
        name, sep, value = item.partition('=')
        name = name.strip()
        if name.startswith('$') and len(name) > 1 and name != '$0':
            name = name[1:]
        if not sep or not name or not value.strip():
            raise ValueError(f"expected NAME=VALUE, got '{item}'")
        out.append((name, parse_literal(value.strip(), bits)))
    return out
