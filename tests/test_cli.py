"""Smoke tests for the castdesk CLI wrapper.

Run with: python -m pytest tests/test_cli.py -v
"""
from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
SEED = ROOT / "data" / "demo_casting.yaml"


def _run_cli(*args: str, timeout: int = 30) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "castdesk", *args],
        capture_output=True,
        text=True,
        timeout=timeout,
        cwd=ROOT,
    )


class TestCLIHelp:
    """Verify that all subcommands register and print help without errors."""

    def test_main_help(self):
        result = _run_cli("--help")
        assert result.returncode == 0
        for command in ("config", "demo", "show", "serve"):
            assert command in result.stdout

    def test_demo_help(self):
        result = _run_cli("demo", "--help")
        assert result.returncode == 0
        assert "--seed" in result.stdout
        assert "--force" in result.stdout

    def test_show_help(self):
        result = _run_cli("show", "--help")
        assert result.returncode == 0
        assert "--character" in result.stdout
        assert "--tab" in result.stdout

    def test_serve_help(self):
        result = _run_cli("serve", "--help")
        assert result.returncode == 0
        assert "--port" in result.stdout


class TestConfig:
    def test_config_lists_resolved_values(self):
        result = _run_cli("config")
        assert result.returncode == 0
        assert "state_path" in result.stdout
        assert "drag_cleanup_max_ms: 100" in result.stdout


class TestDemoAndShow:
    def test_demo_then_show(self, tmp_path):
        state_path = tmp_path / "casting.json"
        result = _run_cli("demo", "--seed", str(SEED), "--state", str(state_path))
        assert result.returncode == 0, result.stdout + result.stderr
        assert "Midnight Harbor" in result.stdout
        assert json.loads(state_path.read_text(encoding="utf-8"))["projects"][0]["id"] == "proj-harbor"

        result = _run_cli("show", "--state", str(state_path))
        assert result.returncode == 0, result.stdout + result.stderr
        assert "Jane Doe" in result.stdout
        assert "3 of 3" in result.stdout

        result = _run_cli("show", "--state", str(state_path), "--tab", "approval")
        assert "GREENLIT" in result.stdout

    def test_demo_refuses_to_overwrite(self, tmp_path):
        state_path = tmp_path / "casting.json"
        state_path.write_text("{}", encoding="utf-8")
        result = _run_cli("demo", "--seed", str(SEED), "--state", str(state_path))
        assert result.returncode == 1
        assert "already exists" in result.stdout

    def test_demo_missing_seed(self, tmp_path):
        result = _run_cli("demo", "--seed", str(tmp_path / "nope.yaml"), "--state", str(tmp_path / "s.json"))
        assert result.returncode == 1
        assert "ERROR" in result.stdout

    def test_show_unknown_character(self, tmp_path):
        state_path = tmp_path / "casting.json"
        _run_cli("demo", "--seed", str(SEED), "--state", str(state_path))
        result = _run_cli("show", "--state", str(state_path), "--character", "ghost")
        assert result.returncode == 1
        assert "not found" in result.stdout
