"""Tests for the command-line interface."""

import json
from unittest.mock import patch, MagicMock

import numpy as np
import pytest

from conftest import write_wav
from podcast_assembler.cli import main
from podcast_assembler.models import RenderResult


# --- Helpers ---

def _create_script(tmp_path, name="episode.txt", content="A: Hello\nB: Hi\n"):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


def _ok_result():
    return RenderResult(success=True, path="out/episode.wav", duration_seconds=2.0,
                        segments=2, omissions=["opening bgm: asset not found"])


# --- render ---

@patch("podcast_assembler.cli.render_program")
def test_render_success(mock_render, tmp_path, capsys):
    mock_render.return_value = _ok_result()
    main(["render", _create_script(tmp_path), "--format", "mp3", "--no-bgm"])
    out = capsys.readouterr().out
    assert "Done: out/episode.wav" in out
    assert "1 omission" in out
    lines, config = mock_render.call_args.args
    assert [l.speaker for l in lines] == ["A", "B"]
    assert config.output_name == "episode"
    assert config.output_format == "mp3"
    assert not config.insert_continuous_bgm and not config.insert_jingles
    assert mock_render.call_args.kwargs == {"verbose": False}


@patch("podcast_assembler.cli.render_program")
def test_render_uses_config_file(mock_render, tmp_path):
    mock_render.return_value = _ok_result()
    config_path = tmp_path / "render.json"
    config_path.write_text(json.dumps({"jingle_interval": 2}))
    main(["render", _create_script(tmp_path), "--config", str(config_path), "--name", "ep1"])
    config = mock_render.call_args.args[1]
    assert config.jingle_interval == 2
    assert config.output_name == "ep1"


@patch("podcast_assembler.cli.render_program",
       MagicMock(return_value=RenderResult(success=False, message="boom")))
def test_render_failure_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["render", _create_script(tmp_path)])
    assert exc.value.code == 1
    assert "Error: boom" in capsys.readouterr().err


def test_render_missing_script(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["render", str(tmp_path / "nope.txt")])
    assert "File not found" in capsys.readouterr().err


def test_render_empty_script(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["render", _create_script(tmp_path, content="# only a heading\n")])
    assert "No script lines" in capsys.readouterr().err


def test_render_bad_config(tmp_path, capsys):
    config_path = tmp_path / "render.json"
    config_path.write_text(json.dumps({"volume": 11}))
    with pytest.raises(SystemExit):
        main(["render", _create_script(tmp_path), "--config", str(config_path)])
    assert "unknown config keys" in capsys.readouterr().err


# --- inspect / assets ---

def test_inspect(tmp_path, capsys):
    path = write_wav(tmp_path / "a.wav", np.zeros(22050, dtype=np.int16), 22050)
    main(["inspect", path])
    out = capsys.readouterr().out
    assert "22050 Hz" in out
    assert "1.00s" in out


def test_inspect_bad_file(tmp_path, capsys):
    bad = tmp_path / "bad.wav"
    bad.write_bytes(b"garbage")
    with pytest.raises(SystemExit):
        main(["inspect", str(bad)])
    assert "RIFF" in capsys.readouterr().err


def test_assets_listing(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    main(["assets", "--program-type", "quiz"])
    out = capsys.readouterr().out
    assert "Assets (quiz)" in out
    assert "countdown" in out
    assert "[--]" in out


def test_no_command_prints_help(capsys):
    main([])
    assert "usage" in capsys.readouterr().out.lower()
