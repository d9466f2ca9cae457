# test_watchdog.py
'''
Tests for dev_watchdog.watch_sources

Requirements
------------
* Two-space indent, single quotes
* Uses pytest and watchdog's real backend
'''

from __future__ import annotations

import os
import threading
import time
from pathlib import Path

import pytest
from watchdog.events import (
  DirCreatedEvent,
  FileCreatedEvent,
  FileDeletedEvent,
  FileModifiedEvent,
  FileMovedEvent,
)

from coffee_guard import dev_watchdog as dw
from coffee_guard.controller import BatchFailure, BatchOutcome


# ─────────────────────────────────────────────────────────────────────────────
# Utility
# ─────────────────────────────────────────────────────────────────────────────
def _touch(path: Path, text: str = 'x') -> None:
  path.write_text(text, encoding='utf-8')
  # Ensure mtime bumps even on very fast writes
  os.utime(path, None)


class FakeController:
  def __init__(self, outcome=None):
    self.outcome = outcome or BatchOutcome()
    self.modified: list[list[str]] = []
    self.removed: list[list[str]] = []
    self.modified_hit = threading.Event()
    self.removed_hit = threading.Event()

  def on_modified_batch(self, paths):
    self.modified.append(paths)
    self.modified_hit.set()
    return self.outcome

  def on_removed_batch(self, paths):
    self.removed.append(paths)
    self.removed_hit.set()


@pytest.fixture
def project(tmp_path: Path, monkeypatch):
  monkeypatch.chdir(tmp_path)
  (tmp_path / 'src').mkdir()
  return tmp_path


def _flat(batches):
  return [p for batch in batches for p in batch]


# ─────────────────────────────────────────────────────────────────────────────
# Test: event → batch routing (synthetic events)
# ─────────────────────────────────────────────────────────────────────────────
def test_handler_routes_events(project: Path):
  mods, rems = [], []
  h = dw._ChangeHandler(mods.append, rems.append)
  src = str(project / 'src' / 'a.coffee')
  dst = str(project / 'src' / 'b.coffee')

  h.on_created(FileCreatedEvent(src))
  h.on_modified(FileModifiedEvent(src))
  h.on_deleted(FileDeletedEvent(src))
  h.on_moved(FileMovedEvent(src, dst))
  h.on_created(DirCreatedEvent(str(project / 'src' / 'new')))

  assert mods == [['src/a.coffee'], ['src/a.coffee'], ['src/b.coffee']]
  assert rems == [['src/a.coffee'], ['src/a.coffee']]


def test_paths_outside_cwd_stay_absolute(project: Path, tmp_path_factory):
  other = tmp_path_factory.mktemp('elsewhere') / 'x.coffee'
  mods = []
  dw._ChangeHandler(mods.append, lambda _: None).on_modified(FileModifiedEvent(str(other)))
  assert mods == [[other.resolve().as_posix()]]


def test_debounce_collapses_burst_into_one_batch():
  sent = []
  delivered = threading.Event()

  def fn(paths):
    sent.append(paths)
    delivered.set()

  debounced = dw._Debounced(fn, 0.2)
  debounced(['src/a.coffee'])
  debounced(['src/b.coffee'])
  debounced(['src/a.coffee'])
  assert sent == []                 # nothing before the window closes
  assert delivered.wait(2.0)
  time.sleep(0.1)
  assert sent == [['src/a.coffee', 'src/b.coffee']]


def test_debounce_delivers_late_paths_without_further_events():
  sent = []
  debounced = dw._Debounced(sent.append, 0.05)
  debounced(['src/a.coffee'])
  time.sleep(0.2)
  debounced(['src/b.coffee'])
  time.sleep(0.2)
  assert sent == [['src/a.coffee'], ['src/b.coffee']]


def test_debounce_cancel_drops_pending():
  sent = []
  debounced = dw._Debounced(sent.append, 0.05)
  debounced(['src/a.coffee'])
  debounced.cancel()
  debounced(['src/b.coffee'])
  time.sleep(0.2)
  assert sent == []


# ─────────────────────────────────────────────────────────────────────────────
# Test: real observer delivers modified / removed batches
# ─────────────────────────────────────────────────────────────────────────────
def test_create_triggers_modified_batch(project: Path):
  guard = FakeController()
  stop = dw.watch_sources(guard, ['src'], debounce_sec=0.05)
  try:
    _touch(project / 'src' / 'a.coffee', 'x = 1')
    assert guard.modified_hit.wait(2.0), 'modified batch not delivered'
    assert 'src/a.coffee' in _flat(guard.modified)
  finally:
    stop()


def test_delete_triggers_removed_batch(project: Path):
  f = project / 'src' / 'gone.coffee'
  _touch(f)
  guard = FakeController()
  stop = dw.watch_sources(guard, ['src'], debounce_sec=0.05)
  try:
    f.unlink()
    assert guard.removed_hit.wait(2.0), 'removed batch not delivered'
    assert 'src/gone.coffee' in _flat(guard.removed)
  finally:
    stop()


def test_failed_batch_keeps_watching(project: Path, caplog):
  guard = FakeController(BatchFailure())
  stop = dw.watch_sources(guard, ['src'], debounce_sec=0.0)
  try:
    _touch(project / 'src' / 'a.coffee')
    assert guard.modified_hit.wait(2.0)
    guard.modified_hit.clear()
    time.sleep(0.1)
    _touch(project / 'src' / 'b.coffee')
    assert guard.modified_hit.wait(2.0), 'watcher stopped after a failed batch'
  finally:
    stop()
  assert 'batch failed' in caplog.text


# ─────────────────────────────────────────────────────────────────────────────
# Test: stop() halts further notifications
# ─────────────────────────────────────────────────────────────────────────────
def test_stop_prevents_future_events(project: Path):
  guard = FakeController()
  stop = dw.watch_sources(guard, ['src'], debounce_sec=0.05)
  _touch(project / 'src' / 'a.coffee', '1')
  assert guard.modified_hit.wait(2.0)
  stop()
  guard.modified_hit.clear()

  _touch(project / 'src' / 'a.coffee', '2')
  time.sleep(0.3)
  assert not guard.modified_hit.is_set(), 'callback fired after stop()'


# ─────────────────────────────────────────────────────────────────────────────
# Test: quick successive saves and deletes all arrive
# ─────────────────────────────────────────────────────────────────────────────
def test_burst_of_saves_reaches_controller(project: Path):
  guard = FakeController()
  stop = dw.watch_sources(guard, ['src'], debounce_sec=0.1)
  try:
    _touch(project / 'src' / 'a.coffee')
    _touch(project / 'src' / 'b.coffee')
    deadline = time.time() + 3.0
    while time.time() < deadline and not {'src/a.coffee', 'src/b.coffee'} <= set(_flat(guard.modified)):
      time.sleep(0.05)
    assert {'src/a.coffee', 'src/b.coffee'} <= set(_flat(guard.modified))
  finally:
    stop()


def test_burst_of_deletes_reaches_controller(project: Path):
  for name in ('a.coffee', 'b.coffee'):
    _touch(project / 'src' / name)
  guard = FakeController()
  stop = dw.watch_sources(guard, ['src'], debounce_sec=0.1)
  try:
    (project / 'src' / 'a.coffee').unlink()
    (project / 'src' / 'b.coffee').unlink()
    deadline = time.time() + 3.0
    while time.time() < deadline and not {'src/a.coffee', 'src/b.coffee'} <= set(_flat(guard.removed)):
      time.sleep(0.05)
    assert {'src/a.coffee', 'src/b.coffee'} <= set(_flat(guard.removed))
  finally:
    stop()


# ─────────────────────────────────────────────────────────────────────────────
# Test: a crashing controller is logged and watching goes on
# ─────────────────────────────────────────────────────────────────────────────
class CrashingController(FakeController):
  def on_modified_batch(self, paths):
    super().on_modified_batch(paths)
    raise RuntimeError('a batch is already being processed')

  def on_removed_batch(self, paths):
    super().on_removed_batch(paths)
    raise RuntimeError('boom')


def test_controller_error_is_logged_and_watching_continues(project: Path, caplog):
  guard = CrashingController()
  stop = dw.watch_sources(guard, ['src'], debounce_sec=0.05)
  try:
    _touch(project / 'src' / 'a.coffee')
    assert guard.modified_hit.wait(2.0)
    time.sleep(0.2)
    guard.modified_hit.clear()
    _touch(project / 'src' / 'b.coffee')
    assert guard.modified_hit.wait(2.0), 'watcher stopped after a controller error'
    (project / 'src' / 'b.coffee').unlink()
    assert guard.removed_hit.wait(2.0)
    time.sleep(0.1)
  finally:
    stop()
  assert 'modified batch crashed' in caplog.text
  assert 'removed batch crashed' in caplog.text
