from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from openai import OpenAI

from .config import TranscribeConfig


logger = logging.getLogger(__name__)


def _build_client(cfg: TranscribeConfig) -> OpenAI:
    if not cfg.api_key:
        raise ValueError("API key is missing. Set TRANSCRIBE_API_KEY or OPENAI_API_KEY.")
    return OpenAI(api_key=cfg.api_key)


def transcribe_audio_with_word_timestamps(audio_path: Path, cfg: TranscribeConfig) -> dict[str, Any]:
    if not cfg.model:
        raise ValueError("TRANSCRIBE_MODEL is not set.")
    client = _build_client(cfg)
    kwargs: dict[str, Any] = {
        "model": cfg.model,
        "response_format": "verbose_json",
        "timestamp_granularities": ["word", "segment"],
    }
    if cfg.language:
        kwargs["language"] = cfg.language
    if cfg.prompt:
        kwargs["prompt"] = cfg.prompt

    logger.info("Sending transcription request model=%s language=%s", cfg.model, cfg.language)
    with audio_path.open("rb") as audio_file:
        resp = client.audio.transcriptions.create(file=audio_file, **kwargs)

    if hasattr(resp, "model_dump"):
        payload = resp.model_dump()
    elif isinstance(resp, dict):
        payload = resp
    else:
        payload = dict(resp)  # type: ignore[arg-type]

    if not (payload.get("words") or payload.get("segments") or str(payload.get("text") or "").strip()):
        raise RuntimeError("Transcription returned no text, words or segments.")
    logger.info(
        "Transcription returned %s words in %s segments",
        len(payload.get("words") or []),
        len(payload.get("segments") or []),
    )
    return payload
