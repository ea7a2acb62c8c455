"""exprmon CLI — evaluate monitor expressions, generate and check test cases.

Usage:
    exprmon eval '$sp + 4*(2-1)' -r sp=0x80000000    Evaluate expressions
    exprmon eval -x '0x10 * 3'                       Print result as hex
    exprmon gen 100 --seed 1 > cases.txt             Random test cases
    exprmon check cases.txt                          Differential check
    exprmon regs -r a0=5                             Dump register file

Cases are ``<expected> <expression>`` lines, as written by ``gen``.
"""

import argparse
import logging
import sys
import time

from . import __version__
from .errors import ExprmonError
from .evaluator import evaluate, evaluate_expression, MAX_DEPTH
from .gen_expr import ExprGenerator, format_case, parse_case, MAX_EXPR_LEN
from .registers import RegisterFile, parse_assignments
from .word import WORD_BITS, word_mask


def _fmt_value(value, bits, hex_out):
    if hex_out:
        return f"0x{value:0{bits // 4}x}"
    return str(value)


def _build_registers(args):
    """RegisterFile with ``-r NAME=VALUE`` assignments applied."""
    regs = RegisterFile(bits=args.bits)
    try:
        assignments = parse_assignments(args.reg or [], args.bits)
    except ValueError as e:
        raise ExprmonError(str(e)) from None
    for name, value in assignments:
        if name not in regs:
            raise ExprmonError(f"unknown register '{name}'")
        regs.set(name, value)
    return regs


def _add_reg_args(p):
    p.add_argument('-r', '--reg', action='append', metavar='NAME=VALUE',
                   help='Set a register before evaluating (repeatable)')
    p.add_argument('--bits', type=int, choices=[32, 64], default=WORD_BITS,
                   help=f'Machine word width (default: {WORD_BITS})')


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='exprmon',
        description='Evaluate debugger-monitor expressions over machine words.')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Trace tokenizer matches and sub-expression values')
    sub = parser.add_subparsers(dest='command', required=True)

    p_eval = sub.add_parser('eval', help='Evaluate expressions')
    p_eval.add_argument('expr', nargs='+', help='Expression(s) to evaluate')
    p_eval.add_argument('-x', '--hex', action='store_true',
                        help='Print results in hex')
    p_eval.add_argument('--max-depth', type=int, default=MAX_DEPTH,
                        help=f'Nesting limit (default: {MAX_DEPTH})')
    _add_reg_args(p_eval)

    p_gen = sub.add_parser('gen', help='Generate random test cases')
    p_gen.add_argument('count', nargs='?', type=int, default=1,
                       help='Number of cases (default: 1)')
    p_gen.add_argument('--seed', type=int, default=None,
                       help='Random seed (default: random)')
    p_gen.add_argument('--max-len', type=int, default=MAX_EXPR_LEN,
                       help=f'Generation buffer size (default: {MAX_EXPR_LEN})')
    p_gen.add_argument('--bits', type=int, choices=[32, 64], default=WORD_BITS,
                       help=f'Machine word width (default: {WORD_BITS})')

    p_check = sub.add_parser('check', help='Check cases from a file')
    p_check.add_argument('file', help="Case file ('-' for stdin)")
    _add_reg_args(p_check)

    p_regs = sub.add_parser('regs', help='Dump the register file')
    _add_reg_args(p_regs)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if getattr(args, 'count', 1) < 0:
        parser.error(f"count must be >= 0, got {args.count}")

    try:
        return COMMANDS[args.command](args)
    except ExprmonError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"\nUnexpected error: {type(e).__name__}: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2


# ══════════════════════════════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════════════════════════════

def cmd_eval(args) -> int:
    """Print the value of each expression; stop at the first failure."""
    regs = _build_registers(args)
    for text in args.expr:
        value = evaluate(text, regs, bits=args.bits, max_depth=args.max_depth)
        print(_fmt_value(value, args.bits, args.hex))
    return 0


def cmd_gen(args) -> int:
    gen = ExprGenerator(seed=args.seed, max_len=args.max_len, bits=args.bits)
    for expected, text in gen.cases(args.count):
        print(format_case(expected, text))
    return 0


def _read_lines(path):
    if path == '-':
        return sys.stdin.readlines()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.readlines()
    except OSError as e:
        raise ExprmonError(f"cannot read '{path}': {e.strerror}") from None


def cmd_check(args) -> int:
    """Evaluate every case line and compare with its expected value."""
    t0 = time.time()
    regs = _build_registers(args)
    mask = word_mask(args.bits)
    passed = mismatched = failed = 0

    for ln, line in enumerate(_read_lines(args.file), 1):
        if not line.strip() or line.lstrip().startswith('#'):
            continue
        try:
            expected, text = parse_case(line)
        except ValueError as e:
            raise ExprmonError(f"{args.file}:{ln}: {e}") from None

        result = evaluate_expression(text, regs, bits=args.bits)
        if not result.ok:
            failed += 1
            print(f"  {ln:5d} | FAIL {result.error}")
        elif result.value != expected & mask:
            mismatched += 1
            print(f"  {ln:5d} | MISMATCH expected {expected & mask}, "
                  f"got {result.value}: {text.strip()}")
        else:
            passed += 1

    total = passed + mismatched + failed
    print(f"\n{total} cases: {passed} passed, {mismatched} mismatched, "
          f"{failed} failed ({time.time() - t0:.2f}s)")
    return 0 if passed == total else 1


def cmd_regs(args) -> int:
    regs = _build_registers(args)
    for name, value in regs.dump():
        print(f"{name:<4} {_fmt_value(value, args.bits, True)} {value}")
    return 0


COMMANDS = {
    'eval': cmd_eval,
    'gen': cmd_gen,
    'check': cmd_check,
    'regs': cmd_regs,
}
