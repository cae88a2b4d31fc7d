"""Re-dispatch assessments stuck in PENDING or ANALYZING.

A worker that died mid-analysis leaves its record claimed; this puts such
records back on the queue once they are older than the cut-off.

Usage:
  python scripts/recover_stale_assessments.py [--minutes 30] [--dry-run]
"""

import argparse
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
  sys.path.insert(0, ROOT)

from hiregate import create_app
from hiregate.services import assessments as store
from hiregate.services import pipeline


def main(argv=None):
  parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
  parser.add_argument('--minutes', type=int, default=None,
                      help='age cut-off in minutes (default: STALE_ANALYSIS_MINUTES)')
  parser.add_argument('--dry-run', action='store_true', help='list stale records without re-dispatching')
  args = parser.parse_args(argv)

  app = create_app()
  with app.app_context():
    minutes = args.minutes if args.minutes is not None else app.config.get('STALE_ANALYSIS_MINUTES', 30)
    if args.dry_run:
      ids = store.list_stale(minutes)
    else:
      ids = pipeline.redispatch_stale(minutes)
    for assessment_id in ids:
      print(assessment_id)
    print(f'{len(ids)} stale assessment(s){" found" if args.dry_run else " re-dispatched"}')


if __name__ == '__main__':
  main()
