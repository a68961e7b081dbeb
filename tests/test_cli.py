"""CLI tests; ffmpeg and OpenAI seams are replaced with fakes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from transcript_search import cli as cli_mod
from transcript_search.config import SearchConfig, TranscribeConfig


PAYLOAD: dict[str, Any] = {
    "text": "See Spot run.",
    "segments": [
        {
            "start": 0.0,
            "end": 0.9,
            "text": "See Spot run.",
            "words": [
                {"word": "See", "start": 0.0, "end": 0.3},
                {"word": "Spot", "start": 0.3, "end": 0.6},
                {"word": "run.", "start": 0.6, "end": 0.9},
            ],
        }
    ],
}


@pytest.fixture()
def cfg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> SearchConfig:
    config = SearchConfig(
        transcribe=TranscribeConfig(api_key="sk-test", model="whisper-1", language="en", prompt=None),
        ffmpeg_bin="ffmpeg",
        context_words=5,
        clip_padding=0.0,
        output_root=tmp_path / "outputs",
    )
    monkeypatch.setattr(cli_mod.SearchConfig, "from_env", classmethod(lambda cls: config))
    return config


@pytest.fixture()
def transcription_json(tmp_path: Path) -> Path:
    path = tmp_path / "transcription.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")
    return path


def test_search_prints_timestamped_matches(
    cfg: SearchConfig, transcription_json: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli_mod.main(["search", str(transcription_json), "spot run"]) == 0

    out = capsys.readouterr().out
    assert out.splitlines() == ["[00:00.300 -> 00:00.900] Spot run. | See Spot run."]


def test_search_json_output(cfg: SearchConfig, transcription_json: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_mod.main(["search", str(transcription_json), "SEE", "--json", "--context", "1"]) == 0

    assert json.loads(capsys.readouterr().out) == [
        {"text": "See", "start": 0.0, "end": 0.3, "context": "See Spot"}
    ]


def test_search_without_matches(cfg: SearchConfig, transcription_json: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_mod.main(["search", str(transcription_json), "zebra"]) == 0

    assert capsys.readouterr().out.strip() == 'No matches for "zebra"'


def test_search_warns_about_synthetic_timing(
    cfg: SearchConfig, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "text_only.json"
    path.write_text(json.dumps({"text": "hello world"}), encoding="utf-8")

    assert cli_mod.main(["search", str(path), "world"]) == 0

    captured = capsys.readouterr()
    assert "[00:00.500 -> 00:01.000] world | hello world" in captured.out
    assert "no word timestamps" in captured.err


def test_blank_query_is_a_usage_error(cfg: SearchConfig, transcription_json: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli_mod.main(["search", str(transcription_json), "   "])

    assert exc_info.value.code == 2


def test_missing_transcription_reports_error(
    cfg: SearchConfig, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli_mod.main(["search", str(tmp_path / "missing.json"), "spot"]) == 1

    assert capsys.readouterr().err.startswith("ERROR:")


def test_clip_cuts_each_match(
    cfg: SearchConfig, transcription_json: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[Any, ...]] = []

    def _fake_cut(ffmpeg_bin: str, source: Path, matches: list[Any], out_dir: Path, padding: float = 0.0) -> list[Path]:
        calls.append((ffmpeg_bin, source, [m.text for m in matches], out_dir, padding))
        return [out_dir / "001_spot.wav"]

    monkeypatch.setattr(cli_mod, "cut_match_clips", _fake_cut)

    argv = ["clip", "audio.wav", str(transcription_json), "spot", "--out-dir", str(tmp_path / "clips"), "--padding", "0.2"]
    assert cli_mod.main(argv) == 0

    assert calls == [("ffmpeg", Path("audio.wav"), ["Spot"], tmp_path / "clips", 0.2)]


def test_export_pdf_writes_file(cfg: SearchConfig, transcription_json: Path, tmp_path: Path) -> None:
    output = tmp_path / "report.pdf"

    assert cli_mod.main(["export-pdf", str(transcription_json), "run", "-o", str(output)]) == 0

    assert output.read_bytes().startswith(b"%PDF")


def test_transcribe_saves_payload(
    cfg: SearchConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(cli_mod, "transcribe_audio_with_word_timestamps", lambda path, tcfg: PAYLOAD)
    output = tmp_path / "out" / "transcription.json"

    assert cli_mod.main(["transcribe", "audio.wav", "-o", str(output)]) == 0

    assert json.loads(output.read_text(encoding="utf-8")) == PAYLOAD


def test_run_all_writes_work_dir(cfg: SearchConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    extracted: list[Path] = []
    clipped: list[list[str]] = []
    monkeypatch.setattr(
        cli_mod, "extract_audio_to_wav", lambda ffmpeg_bin, src, dst, sample_rate=16000: extracted.append(dst)
    )
    monkeypatch.setattr(cli_mod, "transcribe_audio_with_word_timestamps", lambda path, tcfg: PAYLOAD)
    monkeypatch.setattr(
        cli_mod,
        "cut_match_clips",
        lambda ffmpeg_bin, src, matches, out_dir, padding=0.0: clipped.append([m.text for m in matches]) or [],
    )
    work_dir = tmp_path / "work"

    assert cli_mod.main(["run-all", "talk.mp4", "see spot", "--work-dir", str(work_dir)]) == 0

    assert extracted == [work_dir / "audio.wav"]
    assert json.loads((work_dir / "transcription.json").read_text(encoding="utf-8")) == PAYLOAD
    matches = json.loads((work_dir / "matches.json").read_text(encoding="utf-8"))
    assert matches == [{"text": "See Spot", "start": 0.0, "end": 0.6, "context": "See Spot run."}]
    assert clipped == [["See Spot"]]
