"""Tests for the command-line entry point."""

import json
import os
import re
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from main import build_parser, main
from vramprobe.probe import collect_snapshot

PROJECT_ROOT = Path(__file__).resolve().parent.parent
LINE_PATTERN = re.compile(r"^(N/A|\d+\.\d);(N/A|\d+\.\d);(N/A|\d+)$")


@pytest.fixture
def patched_snapshot(eight_gb_registry, healthy_counters):
    """Run main() against fabricated instrumentation without touching logging config."""
    with patch("main.collect_snapshot", lambda: collect_snapshot(eight_gb_registry, healthy_counters)):
        with patch("main.init_logging"):
            yield


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.table is False
        assert args.verbose is False
        assert args.format == "line"

    def test_rejects_unknown_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--format", "xml"])


class TestMain:
    def test_prints_line_only(self, patched_snapshot, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert out == "1.5;8.0;65\n"

    def test_table_mode(self, patched_snapshot, capsys):
        main(["--table"])
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "1.5;8.0;65"
        assert "GPU Memory" in out
        assert "3D Engine" in out

    def test_json_mode(self, patched_snapshot, capsys):
        main(["--format", "json"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "1.5;8.0;65"
        data = json.loads("\n".join(lines[1:]))
        assert data["memory"]["total_gb"] == 8.0
        assert data["utilization"]["percent"] == 65

    def test_prometheus_mode(self, patched_snapshot, capsys):
        main(["--format", "prometheus"])
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "1.5;8.0;65"
        assert "vramprobe_vram_total_gb 8.0" in out

    def test_verbose_notes_go_to_stderr(self, empty_registry, healthy_counters, capsys):
        with patch("main.collect_snapshot", lambda: collect_snapshot(empty_registry, healthy_counters)):
            with patch("main.init_logging"):
                main(["--verbose"])
        captured = capsys.readouterr()
        assert captured.out == "1.5;N/A;65\n"
        assert "No display adapter entries" in captured.err

    @pytest.mark.integration
    def test_invalid_environment_still_prints_line(self):
        """A bad VRAMPROBE_* value must not stop the first line from being printed."""
        env = dict(os.environ, VRAMPROBE_COUNTER_TIMEOUT="0")
        completed = subprocess.run(
            [sys.executable, "main.py"],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
            timeout=120,
        )
        assert completed.returncode == 0
        first_line = completed.stdout.splitlines()[0]
        assert LINE_PATTERN.match(first_line)
        assert "Ignoring invalid VRAMPROBE_* settings" in completed.stderr
