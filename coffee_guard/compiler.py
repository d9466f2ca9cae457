# compiler.py
'''
The compile step, kept behind a tiny protocol so the pipeline never cares
how JavaScript actually gets produced.

Default backend shells out to the CoffeeScript CLI:
    npm install -g coffeescript
'''

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Protocol

from .options import Options


class CompileError(Exception):
  '''A single source failed to compile.'''

  def __init__(self, source: str, message: str) -> None:
    super().__init__(f'{source}: {message}')
    self.source = source
    self.message = message


class Compiler(Protocol):
  def compile(self, source: str, target: str, options: Options) -> None:
    '''Write the artifact for *source* to *target* or raise CompileError.'''
    ...


class CoffeeCompiler:
  def __init__(self, executable: str = 'coffee') -> None:
    self.executable = executable

  def _command(self, source: str, target: str, options: Options) -> List[str]:
    cmd = [self.executable, '--compile']
    if options.bare:
      cmd.append('--bare')
    if options.source_map:
      # coffee names the output after the source, which is what target is
      cmd += ['--map', '--output', str(Path(target).parent)]
    else:
      cmd.append('--print')
    cmd.append(source)
    return cmd

  def compile(self, source: str, target: str, options: Options) -> None:
    cmd = self._command(source, target, options)
    try:
      Path(target).parent.mkdir(parents=True, exist_ok=True)
      proc = subprocess.run(cmd, capture_output=True, encoding='utf-8', check=False)
    except (OSError, UnicodeDecodeError) as exc:   # missing executable, non-UTF-8 output
      raise CompileError(source, str(exc)) from exc

    if proc.returncode != 0:
      msg = (proc.stderr or proc.stdout).strip() or f'exit status {proc.returncode}'
      raise CompileError(source, msg)

    if not options.source_map:
      try:
        Path(target).write_text(proc.stdout, encoding='utf-8')
      except OSError as exc:
        raise CompileError(source, str(exc)) from exc
