# dev_watchdog.py
'''
Event-driven host for the Controller, based on the `watchdog` library.

API
---
watch_sources(controller, directories, recursive=True)  ->  stop_fn
    • controller   : Controller receiving modified / removed batches
    • directories  : iterable of directories to observe
    • recursive    : watch sub-directories as well
Returns:
    stop_fn()      : call to stop the observer thread cleanly
'''

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Iterable, List

from watchdog.events import (
  FileSystemEvent,
  FileSystemEventHandler,
  FileSystemMovedEvent,
)
from watchdog.observers import Observer

from .controller import BatchFailure, Controller

logger = logging.getLogger(__name__)


def _display_path(raw: str | bytes) -> str:
  '''Path relative to cwd (POSIX style) so watch patterns can match it.'''
  p = Path(os.fsdecode(raw)).resolve()
  try:
    return p.relative_to(Path.cwd().resolve()).as_posix()
  except ValueError:
    return p.as_posix()


class _ChangeHandler(FileSystemEventHandler):
  def __init__(
    self,
    on_modified: Callable[[List[str]], None],
    on_removed: Callable[[List[str]], None],
  ) -> None:
    super().__init__()
    self._modified = on_modified
    self._removed = on_removed

  # “modified” also fires on create/overwrite for most editors
  def on_modified(self, event: FileSystemEvent):  # type: ignore[override]
    if not event.is_directory:
      self._modified([_display_path(event.src_path)])

  on_created = on_modified

  def on_deleted(self, event: FileSystemEvent):  # type: ignore[override]
    if not event.is_directory:
      self._removed([_display_path(event.src_path)])

  def on_moved(self, event: FileSystemMovedEvent):  # type: ignore[override]
    if not event.is_directory:
      self._removed([_display_path(event.src_path)])
      self._modified([_display_path(event.dest_path)])


def watch_sources(
  controller: Controller,
  directories: Iterable[str | Path],
  *,
  recursive: bool = True,
  debounce_sec: float = 0.05,   # collapse rapid bursts
) -> Callable[[], None]:
  lock = threading.Lock()       # one batch at a time

  def modified(paths: List[str]) -> None:
    try:
      with lock:
        outcome = controller.on_modified_batch(paths)
    except Exception:
      logger.exception('modified batch crashed: %s', ', '.join(paths))
      return
    if isinstance(outcome, BatchFailure):
      logger.error('batch failed: %s', ', '.join(paths))

  def removed(paths: List[str]) -> None:
    try:
      with lock:
        controller.on_removed_batch(paths)
    except Exception:
      logger.exception('removed batch crashed: %s', ', '.join(paths))

  on_modified = _Debounced(modified, debounce_sec)
  on_removed = _Debounced(removed, debounce_sec)
  handler = _ChangeHandler(on_modified, on_removed)

  observer = Observer()
  for d in {Path(d).resolve() for d in directories}:
    observer.schedule(handler, str(d), recursive=recursive)
  observer.start()

  def stop() -> None:
    observer.stop()
    on_modified.cancel()
    on_removed.cancel()
    observer.join()

  return stop


# ---------- utility: trailing-edge debounce ---------------------------------
class _Debounced:
  '''
  Collect paths and hand them to *fn* once no new call arrived for *wait*
  seconds.  Every path reaches *fn* exactly once, bursts become one batch.
  '''

  def __init__(self, fn: Callable[[List[str]], None], wait: float) -> None:
    self._fn = fn
    self._wait = wait
    self._lock = threading.Lock()
    self._pending: List[str] = []
    self._timer: threading.Timer | None = None
    self._closed = False

  def __call__(self, paths: List[str]) -> None:
    with self._lock:
      if self._closed:
        return
      self._pending += [p for p in paths if p not in self._pending]
      if self._timer is not None:
        self._timer.cancel()
      self._timer = threading.Timer(self._wait, self.flush)
      self._timer.daemon = True
      self._timer.start()

  def flush(self) -> None:
    with self._lock:
      to_send, self._pending = self._pending, []
      self._timer = None
    if to_send:
      self._fn(to_send)

  def cancel(self) -> None:
    with self._lock:
      self._closed = True
      if self._timer is not None:
        self._timer.cancel()
        self._timer = None
      self._pending = []
