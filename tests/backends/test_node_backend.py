"""
Tests for the Node.js Backend.

The subprocess is mocked; these tests cover the JSON bridge protocol.

Verifies that:
1. Requests are sent as JSON on stdin to `node node_bridge.mjs`.
2. Successful responses return the processed code.
3. Error responses, crashes, garbage output and spawn failures raise the matching error.
4. A cancelled call kills the child process.
"""

import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from codetoggle.backends.node import BRIDGE_SCRIPT, NodeBackend
from codetoggle.config import RuntimeConfig
from codetoggle.enums import Dialect
from codetoggle.errors import FormatError, TranspileError


class FakeProcess:
  def __init__(self, stdout=b"", stderr=b"", returncode=0):
    self.stdout = stdout
    self.stderr = stderr
    self.returncode = returncode
    self.sent = None
    self.killed = False

  async def communicate(self, data):
    self.sent = data
    return self.stdout, self.stderr

  def kill(self):
    self.killed = True


class HangingProcess(FakeProcess):
  def __init__(self):
    super().__init__(returncode=None)

  async def communicate(self, data):
    await asyncio.sleep(10)


def fake_exec(process):
  calls = []

  async def _exec(*args, **kwargs):
    calls.append((args, kwargs))
    return process

  return _exec, calls


def respond(payload):
  return FakeProcess(stdout=json.dumps(payload).encode("utf-8"))


def test_bridge_script_ships_with_package():
  assert BRIDGE_SCRIPT.name == "node_bridge.mjs"
  assert BRIDGE_SCRIPT.is_file()


def test_available_checks_path():
  with patch("shutil.which", return_value=None):
    assert not NodeBackend().available()
  with patch("shutil.which", return_value="/usr/bin/node"):
    assert NodeBackend().available()


def test_format_request_and_response(tmp_path):
  process = respond({"ok": True, "code": "const a = 1\n"})
  exec_fn, calls = fake_exec(process)
  backend = NodeBackend(RuntimeConfig(node_executable="nodejs", node_project_dir=tmp_path))

  with patch("asyncio.create_subprocess_exec", new=exec_fn):
    out = asyncio.run(backend.format("const a = 1;", Dialect.TS))

  assert out == "const a = 1\n"
  args, kwargs = calls[0]
  assert args == ("nodejs", str(BRIDGE_SCRIPT))
  assert kwargs["cwd"] == str(tmp_path)
  assert json.loads(process.sent) == {"op": "format", "code": "const a = 1;", "dialect": "ts"}


def test_transpile_request():
  process = respond({"ok": True, "code": "const a = 1;\n"})
  exec_fn, calls = fake_exec(process)

  with patch("asyncio.create_subprocess_exec", new=exec_fn):
    out = asyncio.run(NodeBackend().transpile("const a: number = 1"))

  assert out == "const a = 1;\n"
  assert json.loads(process.sent) == {"op": "transpile", "code": "const a: number = 1"}
  assert calls[0][1]["cwd"] is None


def test_error_response_maps_to_format_error():
  exec_fn, _ = fake_exec(respond({"ok": False, "error": "';' expected.", "line": 3}))

  with patch("asyncio.create_subprocess_exec", new=exec_fn):
    with pytest.raises(FormatError) as excinfo:
      asyncio.run(NodeBackend().format("x", Dialect.JS))

  assert excinfo.value.detail == "';' expected."
  assert excinfo.value.line == 3


def test_nonzero_exit_maps_to_transpile_error():
  exec_fn, _ = fake_exec(FakeProcess(stderr=b"Cannot find package 'typescript'", returncode=1))

  with patch("asyncio.create_subprocess_exec", new=exec_fn):
    with pytest.raises(TranspileError, match="Cannot find package 'typescript'"):
      asyncio.run(NodeBackend().transpile("x"))


def test_malformed_response():
  exec_fn, _ = fake_exec(FakeProcess(stdout=b"not json"))

  with patch("asyncio.create_subprocess_exec", new=exec_fn):
    with pytest.raises(TranspileError, match="Malformed response"):
      asyncio.run(NodeBackend().transpile("x"))


def test_spawn_failure():
  async def _missing(*args, **kwargs):
    raise FileNotFoundError("node")

  with patch("asyncio.create_subprocess_exec", new=_missing):
    with pytest.raises(FormatError, match="Could not start 'node'"):
      asyncio.run(NodeBackend().format("x", Dialect.TS))


def test_cancelled_call_kills_child():
  process = HangingProcess()
  exec_fn, _ = fake_exec(process)

  async def _run():
    await asyncio.wait_for(NodeBackend().transpile("x"), timeout=0.01)

  with patch("asyncio.create_subprocess_exec", new=exec_fn):
    with pytest.raises(asyncio.TimeoutError):
      asyncio.run(_run())

  assert process.killed


def test_bridge_uses_house_style():
  source = Path(BRIDGE_SCRIPT).read_text(encoding="utf-8")
  assert "semi: false" in source
  assert "singleQuote: true" in source
