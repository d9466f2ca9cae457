# options.py
'''
Immutable options record plus the watch patterns it carries.

    merge_options(overrides) -> Options
        • every key missing from *overrides* takes its value from DEFAULT_OPTIONS
        • unknown keys and badly typed values raise ConfigError
'''

from __future__ import annotations

import dataclasses
import os
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Pattern, Tuple, Union


SOURCE_EXTENSIONS: Tuple[str, ...] = ('coffee', 'coffee.md', 'litcoffee')


class ConfigError(ValueError):
  '''Raised for unknown option keys or values of the wrong type.'''


# ─────────────────────────────────────────────────────────────────────────────
# WatchPattern — compiled matcher + accepted extensions
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class WatchPattern:
  matcher: Pattern[str]
  extensions: Tuple[str, ...] = SOURCE_EXTENSIONS
  root: Optional[str] = None

  @classmethod
  def of(
    cls,
    pattern: Union[str, Pattern[str]],
    extensions: Tuple[str, ...] = SOURCE_EXTENSIONS,
    root: Optional[str] = None,
  ) -> 'WatchPattern':
    try:
      matcher = re.compile(pattern) if isinstance(pattern, str) else pattern
    except re.error as exc:
      raise ConfigError(f'invalid watch pattern {pattern!r}: {exc}') from exc
    return cls(matcher, tuple(extensions), root)

  def match(self, path: str) -> Optional[re.Match]:
    if not any(path.endswith('.' + ext) for ext in self.extensions):
      return None
    return self.matcher.search(path)


def normalize_dir(path: str) -> str:
  '''
  Directory in the form paths are reported in: POSIX style, normalised and
  relative to cwd when it lies below it.
  '''
  norm = posixpath.normpath(path.replace(os.sep, '/'))
  if posixpath.isabs(norm):
    try:
      return Path(norm).resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
      return norm
  return norm


def pattern_for_input(input_dir: str) -> WatchPattern:
  '''Pattern watching every CoffeeScript source below *input_dir*.'''
  root = normalize_dir(input_dir)
  exts = '|'.join(re.escape(ext) for ext in SOURCE_EXTENSIONS)
  prefix = '' if root == '.' else re.escape(root.rstrip('/')) + '/'
  return WatchPattern.of(f'^{prefix}(.+\\.(?:{exts}))$', root=root)


# ─────────────────────────────────────────────────────────────────────────────
# Options
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Options:
  output: Optional[str] = None
  bare: bool = False
  shallow: bool = False
  hide_success: bool = False
  noop: bool = False
  all_on_start: bool = False
  source_map: bool = False
  input: Optional[str] = None
  watchers: Tuple[WatchPattern, ...] = field(default_factory=tuple)


DEFAULT_OPTIONS = Options()

_BOOL_FIELDS = frozenset(
  f.name for f in dataclasses.fields(Options) if f.type in ('bool', bool)
)
_STR_FIELDS = frozenset({'output', 'input'})


def _merged_value(name: str, value: object) -> object:
  default = getattr(DEFAULT_OPTIONS, name)
  if value is None:
    return default
  if name in _BOOL_FIELDS:
    if not isinstance(value, bool):
      raise ConfigError(f'option {name!r} expects a bool, got {value!r}')
    return value
  if name in _STR_FIELDS:
    if not isinstance(value, str) or not value:
      raise ConfigError(f'option {name!r} expects a non-empty string, got {value!r}')
    return value
  # watchers
  if isinstance(value, (str, bytes)) or not hasattr(value, '__iter__'):
    raise ConfigError(f'option {name!r} expects a sequence of WatchPattern')
  watchers = tuple(value)  # type: ignore[arg-type]
  for w in watchers:
    if not isinstance(w, WatchPattern):
      raise ConfigError(f'watchers entry {w!r} is not a WatchPattern')
  return watchers


def merge_options(overrides: Optional[Mapping[str, object]] = None) -> Options:
  '''
  Merge *overrides* onto DEFAULT_OPTIONS one field at a time.

  When ``input`` is present a pattern for it is appended after the explicit
  watchers and ``output`` falls back to the normalised ``input``.
  '''
  overrides = dict(overrides or {})
  known = {f.name for f in dataclasses.fields(Options)}
  unknown = sorted(set(overrides) - known)
  if unknown:
    raise ConfigError(f'unknown option(s): {", ".join(unknown)}')

  values = {name: _merged_value(name, overrides.get(name)) for name in known}

  if values['input'] is not None:
    values['input'] = normalize_dir(values['input'])
    values['watchers'] = values['watchers'] + (pattern_for_input(values['input']),)
    if values['output'] is None:
      values['output'] = values['input']

  return Options(**values)
