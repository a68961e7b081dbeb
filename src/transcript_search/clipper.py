from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from .ffmpeg_utils import cut_audio_segment
from .models import MatchResult


logger = logging.getLogger(__name__)

MIN_CLIP_SECONDS = 0.05


def _slugify(value: str) -> str:
    value = value.strip().lower()
    value = re.sub(r"[^a-z0-9]+", "_", value)
    value = re.sub(r"_+", "_", value)
    return value.strip("_") or "match"


def _clip_output_name(index: int, match: MatchResult) -> str:
    return f"{index:03d}_{_slugify(match.text)[:48]}.wav"


def clip_bounds(match: MatchResult, padding: float = 0.0) -> tuple[float, float]:
    start = max(0.0, match.start - padding)
    end = max(match.end + padding, start + MIN_CLIP_SECONDS)
    return start, end


def cut_match_clips(
    ffmpeg_bin: str,
    source_audio: Path,
    matches: Sequence[MatchResult],
    out_dir: Path,
    padding: float = 0.0,
) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    created: list[Path] = []
    for idx, match in enumerate(matches, start=1):
        output_path = out_dir / _clip_output_name(idx, match)
        start, end = clip_bounds(match, padding)
        logger.info("Cutting %r [%.3f-%.3f] -> %s", match.text, start, end, output_path)
        cut_audio_segment(
            ffmpeg_bin=ffmpeg_bin,
            input_audio=source_audio,
            start=start,
            end=end,
            output_path=output_path,
        )
        created.append(output_path)
    return created
