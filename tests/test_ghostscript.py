import subprocess
from pathlib import Path

from pdf_compress_api.config import DEFAULT_PRESETS
from pdf_compress_api.engine import ghostscript
from pdf_compress_api.engine.presets import build_recipe, resolve_preset


def _recipe(tmp_path: Path):
    preset = resolve_preset("strong", DEFAULT_PRESETS, "recommended")
    return build_recipe(preset, tmp_path / "in.pdf", tmp_path / "out" / "out.pdf")


def test_missing_binary_is_a_start_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(ghostscript.shutil, "which", lambda name: None)

    result = ghostscript.run_ghostscript(_recipe(tmp_path), timeout_seconds=5)

    assert result.process_start_failed
    assert not result.exit_succeeded


def test_launch_error_is_a_start_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(ghostscript.shutil, "which", lambda name: "/usr/bin/gs")

    def _run(*args, **kwargs):
        raise PermissionError("not executable")

    monkeypatch.setattr(ghostscript.subprocess, "run", _run)

    result = ghostscript.run_ghostscript(_recipe(tmp_path), timeout_seconds=5)
    assert result.process_start_failed
    assert "not executable" in result.stderr


def test_passes_exact_arguments_and_timeout(tmp_path, monkeypatch):
    seen = {}
    recipe = _recipe(tmp_path)
    monkeypatch.setattr(ghostscript.shutil, "which", lambda name: name if name == "gs" else None)

    def _run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["kwargs"] = kwargs
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(ghostscript.subprocess, "run", _run)

    result = ghostscript.run_ghostscript(recipe, timeout_seconds=42)

    assert seen["cmd"] == ["gs", *recipe.argument_list]
    assert seen["kwargs"]["timeout"] == 42
    assert seen["kwargs"]["capture_output"] is True
    assert result.exit_succeeded
    assert result.return_code == 0
    assert recipe.output_path.parent.is_dir()


def test_timeout_is_captured_not_raised(tmp_path, monkeypatch):
    monkeypatch.setattr(ghostscript.shutil, "which", lambda name: "gs")

    def _run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"], output=b"", stderr=b"Failed to initialise downsample filter")

    monkeypatch.setattr(ghostscript.subprocess, "run", _run)

    result = ghostscript.run_ghostscript(_recipe(tmp_path), timeout_seconds=1)

    assert result.timed_out
    assert not result.exit_succeeded
    assert result.stderr == "Failed to initialise downsample filter"


def test_nonzero_exit_captures_stderr(tmp_path, monkeypatch):
    monkeypatch.setattr(ghostscript.shutil, "which", lambda name: "gs")
    monkeypatch.setattr(
        ghostscript.subprocess,
        "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, stdout="out", stderr="Error: /syntaxerror"),
    )

    result = ghostscript.run_ghostscript(_recipe(tmp_path), timeout_seconds=5)

    assert not result.exit_succeeded
    assert not result.timed_out
    assert result.return_code == 1
    assert result.stderr == "Error: /syntaxerror"
    assert result.stdout == "out"


def test_preferred_command_is_tried_first(monkeypatch):
    monkeypatch.setattr(ghostscript.shutil, "which", lambda name: f"/opt/{name}")
    assert ghostscript.get_ghostscript_command("/opt/gs-10/bin/gs") == "/opt/gs-10/bin/gs"
    assert ghostscript.get_ghostscript_command() == "gs"


def test_missing_preferred_command_warns_and_falls_back(monkeypatch, caplog):
    monkeypatch.setattr(ghostscript.shutil, "which", lambda name: "/usr/bin/gs" if name == "gs" else None)

    assert ghostscript.get_ghostscript_command("/opt/missing/gs") == "gs"
    assert "GS_COMMAND=/opt/missing/gs not found" in caplog.text
