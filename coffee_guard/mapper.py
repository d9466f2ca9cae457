# mapper.py
'''
Source path → artifact path.  Pure string work, nothing touches the disk.
'''

from __future__ import annotations

import posixpath

from .options import SOURCE_EXTENSIONS, Options, WatchPattern

TARGET_EXTENSION = '.js'

# longest first so 'a.coffee.md' never loses only '.md'
_SUFFIXES = sorted(('.' + ext for ext in SOURCE_EXTENSIONS), key=len, reverse=True)


def is_source(path: str) -> bool:
  return any(path.endswith(sfx) for sfx in _SUFFIXES)


def strip_source_extension(path: str) -> str:
  for sfx in _SUFFIXES:
    if path.endswith(sfx):
      return path[: -len(sfx)]
  return posixpath.splitext(path)[0]


def _relative(source: str, pattern: WatchPattern) -> str:
  '''Path of *source* below the root of the pattern that matched it.'''
  m = pattern.match(source)
  if m is not None and pattern.matcher.groups and m.group(1):
    return m.group(1)
  if pattern.root is not None:
    return posixpath.relpath(source, pattern.root)
  return posixpath.basename(source)


def target_path(source: str, pattern: WatchPattern, options: Options) -> str:
  '''
  Map *source* to its compiled artifact.

  • shallow        → <output>/<basename>.js
  • otherwise      → <output>/<path below pattern root>.js
  • output unset   → next to the source
  '''
  output = options.output
  if output is None:
    output, rel = posixpath.split(source)
  elif options.shallow:
    rel = posixpath.basename(source)
  else:
    rel = _relative(source, pattern)
  return posixpath.join(output, strip_source_extension(rel) + TARGET_EXTENSION)
