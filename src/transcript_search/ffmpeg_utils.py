from __future__ import annotations

import shlex
import subprocess
from pathlib import Path


def _run(cmd: list[str]) -> None:
    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as exc:
        rendered = " ".join(shlex.quote(part) for part in cmd)
        raise RuntimeError(f"Command failed ({exc.returncode}): {rendered}") from exc


def extract_audio_to_wav(
    ffmpeg_bin: str, input_media: Path, output_audio: Path, sample_rate: int = 16000
) -> None:
    output_audio.parent.mkdir(parents=True, exist_ok=True)
    cmd = [
        ffmpeg_bin,
        "-y",
        "-i",
        str(input_media),
        "-vn",
        "-ac",
        "1",
        "-ar",
        str(sample_rate),
        "-c:a",
        "pcm_s16le",
        str(output_audio),
    ]
    _run(cmd)


def cut_audio_segment(
    ffmpeg_bin: str,
    input_audio: Path,
    start: float,
    end: float,
    output_path: Path,
) -> None:
    duration = end - start
    if duration <= 0:
        raise ValueError(f"Invalid segment duration: start={start}, end={end}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = [
        ffmpeg_bin,
        "-y",
        "-ss",
        f"{start:.3f}",
        "-t",
        f"{duration:.3f}",
        "-i",
        str(input_audio),
        "-vn",
        "-ac",
        "1",
        "-c:a",
        "pcm_s16le",
        str(output_path),
    ]
    _run(cmd)
