import argparse
from typing import Dict, List, Optional

from .options import WatchPattern


def parse_argv(argv: Optional[List[str]] = None) -> argparse.Namespace:
  '''
  Parse command-line arguments for *coffee-guard*.

  Parameters
  ----------
  argv
    A custom argument list (mainly for testing).  When None the
    function uses ``sys.argv[1:]`` automatically.

  Returns
  -------
  argparse.Namespace
    • input / output     : source and artifact directories
    • watch_pattern      : extra regex watch patterns (repeatable)
    • bare … source_map  : compile flags, see Options
    • coffee             : CoffeeScript executable
    • watch              : Bool flag - keep watching after the first pass
    • debounce           : Event debounce window in seconds (when --watch)
    • verbose / quiet    : Verbosity count (-v, -vv, …) / warnings only
  '''
  parser = argparse.ArgumentParser(
      prog='coffee-guard',
      description='Incremental CoffeeScript → JavaScript compiler with file watching.',
  )

  # directories & patterns
  parser.add_argument(
      '--input',
      metavar='DIR',
      help='Directory with CoffeeScript sources; watches every *.coffee, '
           '*.coffee.md and *.litcoffee below it.',
  )
  parser.add_argument(
      '--output',
      '-o',
      metavar='DIR',
      help='Directory for generated JavaScript (default: --input, or next to each source).',
  )
  parser.add_argument(
      '--watch-pattern',
      action='append',
      default=[],
      metavar='REGEX',
      help='Extra watch pattern; the first capture group is the path kept below --output. '
           'Repeatable.',
  )

  # compile flags
  parser.add_argument('--bare', '-b', action='store_true',
                      help='Compile without the top-level function safety wrapper.')
  parser.add_argument('--shallow', action='store_true',
                      help='Put every artifact directly into --output (no sub-directories).')
  parser.add_argument('--hide-success', action='store_true',
                      help='Do not report successfully generated files.')
  parser.add_argument('--noop', action='store_true',
                      help='Compute target paths but do not compile anything.')
  parser.add_argument('--all-on-start', action='store_true',
                      help='With --watch: compile every watched file before watching.')
  parser.add_argument('--source-map', '-m', action='store_true',
                      help='Generate a .js.map next to every artifact.')
  parser.add_argument('--coffee', default='coffee', metavar='EXE',
                      help='CoffeeScript compiler executable (default: coffee).')

  # watch mode
  parser.add_argument(
      '--watch',
      '-w',
      action='store_true',
      help='Keep watching the sources and recompile on change.',
  )
  parser.add_argument(
      '--debounce',
      type=float,
      default=0.05,
      metavar='SEC',
      help='Debounce window for --watch (default: 0.05 s).',
  )

  # verbosity
  parser.add_argument(
      '--verbose',
      '-v',
      action='count',
      default=0,
      help='Increase logging verbosity; repeat for more detail.',
  )
  parser.add_argument(
      '--quiet',
      '-q',
      action='store_true',
      help='Only log warnings and errors.',
  )

  try:
    import argcomplete
    argcomplete.autocomplete(parser)
  except ImportError:
    pass
  return parser.parse_args(argv)


def options_from_args(args: argparse.Namespace) -> Dict[str, object]:
  '''Controller overrides for the parsed *args*; unset flags are left out.'''
  overrides: Dict[str, object] = {
    'output': args.output,
    'input': args.input,
    'watchers': [WatchPattern.of(rx) for rx in args.watch_pattern],
  }
  for flag in ('bare', 'shallow', 'hide_success', 'noop', 'all_on_start', 'source_map'):
    if getattr(args, flag):
      overrides[flag] = True
  return overrides
