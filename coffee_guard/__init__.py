# coffee_guard/__init__.py
from importlib.metadata import version, PackageNotFoundError

try:
  __version__ = version('coffee-guard')
except PackageNotFoundError:      # development mode
  __version__ = '0.0.0.dev0'

from .options import Options, WatchPattern, DEFAULT_OPTIONS, ConfigError, merge_options  # re-export
from .compiler import Compiler, CoffeeCompiler, CompileError                            # re-export
from .runner import BatchResult                                                          # re-export
from .controller import Controller, BatchOutcome, BatchFailure                          # re-export
from .dev_watchdog import watch_sources                                                  # re-export

__all__ = [
  'Options', 'WatchPattern', 'DEFAULT_OPTIONS', 'ConfigError', 'merge_options',
  'Compiler', 'CoffeeCompiler', 'CompileError',
  'BatchResult',
  'Controller', 'BatchOutcome', 'BatchFailure',
  'watch_sources',
]
