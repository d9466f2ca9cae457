# inspector.py
'''
Narrow a batch of changed paths down to the sources worth compiling.
'''

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

from .mapper import is_source

logger = logging.getLogger(__name__)


def _exists(path: str) -> bool:
  try:
    return os.path.isfile(path)
  except (OSError, ValueError) as exc:       # e.g. embedded NUL byte
    logger.debug('cannot stat %r: %s', path, exc)
    return False


def clean(paths: Iterable[Optional[str]], missing_ok: bool = False) -> List[str]:
  '''
  Return *paths* de-duplicated (first occurrence wins), keeping only
  CoffeeScript sources.  Unless *missing_ok*, paths that are not existing
  files are dropped as well.
  '''
  seen = set()
  cleaned: List[str] = []
  for p in paths:
    if not p or p in seen:
      continue
    seen.add(p)
    if not is_source(p):
      logger.debug('skip %s: not a CoffeeScript source', p)
      continue
    if not missing_ok and not _exists(p):
      logger.debug('skip %s: no such file', p)
      continue
    cleaned.append(p)
  return cleaned
