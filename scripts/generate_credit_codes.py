"""Mint redeemable credit codes from the command line.

Usage:
  python scripts/generate_credit_codes.py AMOUNT [--count N]
"""

import argparse
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
  sys.path.insert(0, ROOT)

from hiregate import create_app
from hiregate.services import ledger


def main(argv=None):
  parser = argparse.ArgumentParser(description='Generate credit codes')
  parser.add_argument('amount', type=int, help='credits granted by each code')
  parser.add_argument('--count', type=int, default=1)
  args = parser.parse_args(argv)

  app = create_app()
  with app.app_context():
    for _ in range(max(1, args.count)):
      code = ledger.generate_credit_code(args.amount)
      print(f'{code.code}\t{code.amount}')


if __name__ == '__main__':
  main()
