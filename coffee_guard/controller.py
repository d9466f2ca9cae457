# controller.py
'''
Owns the options and watch patterns and drives Inspector → Runner per batch.

Host entry points
-----------------
    on_start()                -> BatchOutcome | BatchFailure | None
    run_all()                 -> BatchOutcome | BatchFailure
    on_modified_batch(paths)  -> BatchOutcome | BatchFailure
    on_removed_batch(paths)   -> None

A BatchFailure is *returned*, not raised.  Hosts that want exception
semantics can simply ``raise`` it.
'''

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from . import inspector, runner
from .compiler import Compiler
from .mapper import is_source
from .options import Options, WatchPattern, merge_options

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchOutcome:
  produced_artifacts: List[str] = field(default_factory=list)


class BatchFailure(Exception):
  '''At least one source of a modified batch failed to compile.'''

  def __init__(self, produced_artifacts: Optional[List[str]] = None) -> None:
    super().__init__('CoffeeScript compilation failed')
    self.produced_artifacts = list(produced_artifacts or [])


def scan_sources(root: Union[str, Path] = '.') -> List[str]:
  '''Every CoffeeScript source below *root*, sorted, as POSIX relative paths.'''
  base = Path(root)
  found = (p for p in base.rglob('*') if p.is_file() and is_source(p.name))
  return sorted(p.relative_to(base).as_posix() for p in found)


class Controller:
  def __init__(self, compiler: Optional[Compiler] = None, **overrides: object) -> None:
    self._options = merge_options(overrides)
    self.compiler = compiler
    self._busy = False

  @property
  def options(self) -> Options:
    return self._options

  @property
  def watchers(self) -> List[WatchPattern]:
    return list(self._options.watchers)

  @contextmanager
  def _processing(self):
    if self._busy:
      raise RuntimeError('a batch is already being processed')
    self._busy = True
    try:
      yield
    finally:
      self._busy = False

  # ───────────────────────────────────────────────────────────────────────────
  # Lifecycle
  # ───────────────────────────────────────────────────────────────────────────
  def on_start(self) -> Optional[Union[BatchOutcome, BatchFailure]]:
    if self._options.all_on_start:
      return self.run_all()
    return None

  def run_all(self) -> Union[BatchOutcome, BatchFailure]:
    watchers = self.watchers
    paths = [p for p in scan_sources() if any(w.match(p) for w in watchers)]
    logger.debug('compiling %d watched source(s)', len(paths))
    return self.on_modified_batch(paths)

  def on_modified_batch(self, paths: Iterable[str]) -> Union[BatchOutcome, BatchFailure]:
    with self._processing():
      cleaned = inspector.clean(list(paths))
      artifacts, ok = runner.run(cleaned, self.watchers, self._options, compiler=self.compiler)
    if not ok:
      return BatchFailure(artifacts)
    return BatchOutcome(list(artifacts))

  def on_removed_batch(self, paths: Iterable[str]) -> None:
    with self._processing():
      cleaned = inspector.clean(list(paths), missing_ok=True)
      runner.remove(cleaned, self.watchers, self._options)
