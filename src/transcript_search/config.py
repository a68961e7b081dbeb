from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


DEFAULT_TRANSCRIBE_PROMPT = (
    "This is an English audio recording. Please transcribe it accurately in English."
)


def _first_nonempty(*values: str | None) -> str | None:
    for value in values:
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass
class TranscribeConfig:
    api_key: str | None
    model: str | None
    language: str | None
    prompt: str | None


@dataclass
class SearchConfig:
    transcribe: TranscribeConfig
    ffmpeg_bin: str
    context_words: int
    clip_padding: float
    output_root: Path

    @classmethod
    def from_env(cls) -> "SearchConfig":
        load_dotenv()
        transcribe = TranscribeConfig(
            api_key=_first_nonempty(os.getenv("TRANSCRIBE_API_KEY"), os.getenv("OPENAI_API_KEY")),
            model=_first_nonempty(os.getenv("TRANSCRIBE_MODEL"), "whisper-1"),
            language=_first_nonempty(os.getenv("TRANSCRIBE_LANGUAGE"), "en"),
            prompt=_first_nonempty(os.getenv("TRANSCRIBE_PROMPT"), DEFAULT_TRANSCRIBE_PROMPT),
        )
        context_words = _int_env("CONTEXT_WORDS", 5)
        if context_words < 0:
            raise ValueError("CONTEXT_WORDS must not be negative.")
        clip_padding = _float_env("CLIP_PADDING", 0.0)
        if clip_padding < 0:
            raise ValueError("CLIP_PADDING must not be negative.")

        return cls(
            transcribe=transcribe,
            ffmpeg_bin=_first_nonempty(os.getenv("FFMPEG_BIN"), "ffmpeg") or "ffmpeg",
            context_words=context_words,
            clip_padding=clip_padding,
            output_root=Path(_first_nonempty(os.getenv("OUTPUT_ROOT"), "outputs") or "outputs"),
        )
