# runner.py
'''
Compile or remove a cleaned batch of sources.

    run(paths, watchers, options, compiler=None)  -> BatchResult
    remove(paths, watchers, options)              -> None

A failing source never stops the rest of the batch; it only flips
``all_succeeded`` to False.
'''

from __future__ import annotations

import logging
import os
from typing import Iterable, List, NamedTuple, Optional, Sequence

from .compiler import CoffeeCompiler, CompileError, Compiler
from .mapper import target_path
from .options import Options, WatchPattern

logger = logging.getLogger(__name__)


class BatchResult(NamedTuple):
  produced_artifacts: List[str]
  all_succeeded: bool


def match_pattern(path: str, watchers: Sequence[WatchPattern]) -> Optional[WatchPattern]:
  '''First watcher (declaration order) that matches *path*, else None.'''
  for w in watchers:
    if w.match(path):
      return w
  return None


def _work_items(paths: Iterable[str], watchers: Sequence[WatchPattern], options: Options):
  for p in paths:
    w = match_pattern(p, watchers)
    if w is None:
      logger.debug('skip %s: matches no watch pattern', p)
      continue
    yield p, target_path(p, w, options)


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────
def run(
  paths: Iterable[str],
  watchers: Sequence[WatchPattern],
  options: Options,
  compiler: Optional[Compiler] = None,
) -> BatchResult:
  items = list(_work_items(paths, watchers, options))

  if options.noop:
    return BatchResult([target for _, target in items], True)

  compiler = compiler or CoffeeCompiler()
  produced: List[str] = []
  failed: List[str] = []

  for source, target in items:
    try:
      compiler.compile(source, target, options)
    except CompileError as exc:
      logger.error('Error: %s', exc)
      failed.append(source)
      continue
    produced.append(target)
    if not options.hide_success:
      logger.info('Successfully generated %s', target)

  if failed:
    logger.error('CoffeeScript compilation failed for %d of %d file(s)', len(failed), len(items))
  return BatchResult(produced, not failed)


def remove(paths: Iterable[str], watchers: Sequence[WatchPattern], options: Options) -> None:
  for _, target in _work_items(paths, watchers, options):
    for artifact in (target, target + '.map'):
      try:
        os.remove(artifact)
      except FileNotFoundError:
        continue
      except OSError as exc:
        logger.error('Cannot remove %s: %s', artifact, exc)
        continue
      if not options.hide_success:
        logger.info('Removed %s', artifact)
