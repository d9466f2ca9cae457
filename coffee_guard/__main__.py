# __main__.py
import logging
import sys
import time
from typing import List, Optional

from .compiler import CoffeeCompiler
from .controller import BatchFailure, Controller
from .dev_argparse import options_from_args, parse_argv
from .dev_watchdog import watch_sources
from .options import ConfigError


def _setup_logging(verbose: int, quiet: bool) -> None:
  level = logging.WARNING if quiet else (logging.DEBUG if verbose else logging.INFO)
  logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


def main(argv: Optional[List[str]] = None) -> int:
  args = parse_argv(argv)
  _setup_logging(args.verbose, args.quiet)

  try:
    guard = Controller(CoffeeCompiler(args.coffee), **options_from_args(args))
  except ConfigError as exc:
    logging.getLogger(__name__).error('%s', exc)
    return 2

  if not args.watch:
    outcome = guard.run_all()
    return 1 if isinstance(outcome, BatchFailure) else 0

  guard.on_start()
  stop = watch_sources(guard, [args.input or '.'], debounce_sec=args.debounce)
  try:
    while True:
      time.sleep(1)
  except KeyboardInterrupt:
    pass
  finally:
    stop()
  return 0


if __name__ == '__main__':
  sys.exit(main())
