"""
Pytest configuration and shared fixtures for codenav tests.
"""

import json
import os
import stat
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

from codenav.config import ClientSettings
from codenav.types import CallHierarchyItem, SymbolKind, SymbolReference

FAKE_SERVER_SCRIPT = Path(__file__).parent / "fake_server.py"
FAKE_SERVER_NAME = "fake-zls"


@dataclass
class FakeServer:
    """Handle on a scripted server installed on PATH for one test."""

    settings: ClientSettings
    log_path: Path

    def messages(self) -> list[dict]:
        """Every message the server has read so far."""
        if not self.log_path.exists():
            return []
        return [json.loads(line) for line in self.log_path.read_text().splitlines()]

    def requests(self, method: str) -> list[dict]:
        return [m for m in self.messages() if m.get("method") == method]


@pytest.fixture
def fake_server(tmp_path, monkeypatch):
    """Factory installing a scripted language server as ``fake-zls`` on PATH."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")

    def _make(scenario: dict | None = None, timeout: float = 5.0) -> FakeServer:
        log_path = tmp_path / "server_log.jsonl"
        scenario_path = tmp_path / "scenario.json"
        scenario_path.write_text(json.dumps({**(scenario or {}), "log": str(log_path)}))

        launcher = bin_dir / FAKE_SERVER_NAME
        launcher.write_text(
            f'#!/bin/sh\nexec "{sys.executable}" "{FAKE_SERVER_SCRIPT}" "{scenario_path}"\n'
        )
        launcher.chmod(launcher.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

        settings = ClientSettings(server_command=[FAKE_SERVER_NAME], timeout=timeout)
        return FakeServer(settings=settings, log_path=log_path)

    return _make


@pytest.fixture
def project_dir(tmp_path):
    """Create a minimal Zig project with a caller and a callee."""
    src = tmp_path / "project" / "src"
    src.mkdir(parents=True)

    (src / "main.zig").write_text(
        "const std = @import(\"std\");\n"
        "const parser = @import(\"parser.zig\");\n"
        "\n"
        "pub fn main() void {\n"
        "    parser.parse(\"input\");   \n"
        "}\n"
    )
    (src / "parser.zig").write_text(
        "pub fn parse(text: []const u8) void {\r\n"
        "    _ = tokenize(text);\r\n"
        "}\r\n"
        "\r\n"
        "fn tokenize(text: []const u8) usize {\r\n"
        "    return text.len;\r\n"
        "}\r\n"
    )
    return tmp_path / "project"


def location(path: Path | str, line: int, character: int) -> dict:
    """Build an LSP Location dict."""
    pos = {"line": line, "character": character}
    return {"uri": f"file://{path}", "range": {"start": pos, "end": pos}}


def hierarchy_item(name: str, path: Path | str, line: int, character: int = 0, kind: int = 12) -> dict:
    """Build an LSP CallHierarchyItem dict."""
    pos = {"line": line, "character": character}
    rng = {"start": pos, "end": pos}
    return {
        "name": name,
        "kind": kind,
        "uri": f"file://{path}",
        "range": rng,
        "selectionRange": rng,
    }


@pytest.fixture
def make_item():
    """Factory for CallHierarchyItem values."""
    def _make(
        name: str,
        file_path: str = "/src/main.zig",
        line: int = 0,
        kind: SymbolKind = SymbolKind.FUNCTION,
    ) -> CallHierarchyItem:
        return CallHierarchyItem(name=name, kind=kind, file_path=file_path, line=line, column=0)
    return _make


@pytest.fixture
def make_ref():
    """Factory for SymbolReference values."""
    def _make(file_path: str, line: int = 0, column: int = 0) -> SymbolReference:
        return SymbolReference(file_path=file_path, line=line, column=column)
    return _make
