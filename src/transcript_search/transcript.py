from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from .models import TimedWord, WordSequence


logger = logging.getLogger(__name__)

# Placeholder duration per token when a transcription carries no timing at all.
SYNTHETIC_WORD_DURATION = 0.5


class ProviderWord(BaseModel):
    """One word entry as reported by a transcription provider."""

    word: str = Field(validation_alias=AliasChoices("word", "text"))
    start: float = Field(ge=0, allow_inf_nan=False)
    end: float = Field(ge=0, allow_inf_nan=False)


def _as_payload(transcription: Any) -> Mapping[str, Any]:
    if transcription is None:
        return {}
    if isinstance(transcription, Mapping):
        return transcription
    if hasattr(transcription, "model_dump"):
        return transcription.model_dump()
    try:
        return dict(transcription)
    except (TypeError, ValueError):
        logger.debug("Unsupported transcription payload type: %s", type(transcription).__name__)
        return {}


def _coerce_words(raw_words: Any) -> list[TimedWord]:
    if not isinstance(raw_words, (list, tuple)):
        return []
    words: list[TimedWord] = []
    for idx, entry in enumerate(raw_words):
        try:
            parsed = ProviderWord.model_validate(entry)
        except ValidationError as exc:
            logger.debug("Skipping malformed word entry %s: %s", idx, exc.errors(include_url=False))
            continue
        text = parsed.word.strip()
        if not text:
            continue
        words.append(TimedWord(text=text, start=parsed.start, end=max(parsed.start, parsed.end)))
    return words


def _segment_words(raw_segments: Any) -> list[TimedWord]:
    if not isinstance(raw_segments, (list, tuple)):
        return []
    words: list[TimedWord] = []
    for segment in raw_segments:
        if not isinstance(segment, Mapping):
            continue
        words.extend(_coerce_words(segment.get("words")))
    return words


def synthesize_words(text: str) -> list[TimedWord]:
    return [
        TimedWord(
            text=token,
            start=idx * SYNTHETIC_WORD_DURATION,
            end=(idx + 1) * SYNTHETIC_WORD_DURATION,
        )
        for idx, token in enumerate(text.split())
    ]


def extract_words(transcription: Any) -> WordSequence:
    """Resolve a transcription payload into one flat sequence of timed words.

    Top-level `words` win when present, then the words nested in `segments`
    (concatenated in segment order), and finally evenly spaced placeholder
    timings synthesized from `text`. Missing data yields an empty sequence.
    """
    payload = _as_payload(transcription)

    words = _coerce_words(payload.get("words"))
    if words:
        return WordSequence(words=tuple(words))

    words = _segment_words(payload.get("segments"))
    if words:
        return WordSequence(words=tuple(words))

    text = payload.get("text")
    if isinstance(text, str) and text.strip():
        logger.debug("No word timestamps in transcription; synthesizing from text")
        return WordSequence(words=tuple(synthesize_words(text)), synthetic=True)

    logger.debug("No words found in transcription")
    return WordSequence()


def format_timestamp(seconds: float) -> str:
    seconds = max(0.0, seconds)
    milliseconds = int(round((seconds - int(seconds)) * 1000))
    total_seconds = int(seconds)
    if milliseconds == 1000:
        total_seconds += 1
        milliseconds = 0
    secs = total_seconds % 60
    mins = (total_seconds // 60) % 60
    hours = total_seconds // 3600
    if hours > 0:
        return f"{hours:02d}:{mins:02d}:{secs:02d}.{milliseconds:03d}"
    return f"{mins:02d}:{secs:02d}.{milliseconds:03d}"


def load_transcription(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid transcription JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Transcription JSON in {path} must be an object.")
    return payload


def save_json(data: object, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
