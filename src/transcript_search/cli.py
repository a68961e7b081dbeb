from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from .clipper import cut_match_clips
from .config import SearchConfig
from .export_results_pdf import export_search_pdf
from .ffmpeg_utils import extract_audio_to_wav
from .llm_clients import transcribe_audio_with_word_timestamps
from .models import MatchResult, WordSequence
from .search import context_around, search
from .transcript import extract_words, format_timestamp, load_transcription, save_json


logger = logging.getLogger(__name__)


def _query(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise argparse.ArgumentTypeError("query must not be empty")
    return stripped


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsearch",
        description="Transcript search: transcribe audio, find words or phrases, and locate when they were spoken.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_extract = sub.add_parser("extract-audio", help="Convert an audio or video file to mono WAV.")
    p_extract.add_argument("input_media", type=Path)
    p_extract.add_argument("-o", "--output", type=Path, required=True)
    p_extract.add_argument("--sample-rate", type=int, default=16000)

    p_transcribe = sub.add_parser(
        "transcribe", help="Transcribe audio to verbose JSON with word timestamps using the configured model."
    )
    p_transcribe.add_argument("input_audio", type=Path)
    p_transcribe.add_argument("-o", "--output", type=Path, required=True)

    p_search = sub.add_parser("search", help="Search a transcription JSON for a word or phrase.")
    p_search.add_argument("transcription_json", type=Path)
    p_search.add_argument("query", type=_query)
    p_search.add_argument("--context", type=_non_negative_int, help="Context words on each side of a match.")
    p_search.add_argument("--json", action="store_true", help="Print matches as a JSON array.")

    p_clip = sub.add_parser("clip", help="Cut one audio clip per match from the source audio.")
    p_clip.add_argument("source_audio", type=Path)
    p_clip.add_argument("transcription_json", type=Path)
    p_clip.add_argument("query", type=_query)
    p_clip.add_argument("--out-dir", type=Path, required=True)
    p_clip.add_argument("--padding", type=float, help="Seconds of audio kept around each match.")

    p_export_pdf = sub.add_parser("export-pdf", help="Render search results with context into a PDF.")
    p_export_pdf.add_argument("transcription_json", type=Path)
    p_export_pdf.add_argument("query", type=_query)
    p_export_pdf.add_argument("-o", "--output", type=Path, required=True)
    p_export_pdf.add_argument("--title", type=str)
    p_export_pdf.add_argument("--context", type=_non_negative_int)

    p_all = sub.add_parser("run-all", help="Run extract -> transcribe -> search -> clip.")
    p_all.add_argument("input_media", type=Path)
    p_all.add_argument("query", type=_query)
    p_all.add_argument("--work-dir", type=Path)
    p_all.add_argument("--sample-rate", type=int, default=16000)

    return parser


def _print(msg: str) -> None:
    print(msg, file=sys.stderr)


def _load_words(path: Path, command: str) -> WordSequence:
    words = extract_words(load_transcription(path))
    if words.synthetic:
        _print(f"[{command}] Warning: transcription has no word timestamps; times are estimated at 0.5s per word")
    return words


def _matches_jsonable(words: WordSequence, matches: list[MatchResult], context_words: int) -> list[dict[str, Any]]:
    return [
        {
            "text": match.text,
            "start": match.start,
            "end": match.end,
            "context": context_around(words, match, context_words),
        }
        for match in matches
    ]


def format_match_line(words: WordSequence, match: MatchResult, context_words: int) -> str:
    span = f"[{format_timestamp(match.start)} -> {format_timestamp(match.end)}]"
    return f"{span} {match.text} | {context_around(words, match, context_words)}"


def cmd_extract_audio(args: argparse.Namespace, cfg: SearchConfig) -> int:
    _print(f"[extract-audio] Extracting audio from {args.input_media} -> {args.output}")
    extract_audio_to_wav(cfg.ffmpeg_bin, args.input_media, args.output, sample_rate=args.sample_rate)
    _print("[extract-audio] Done")
    return 0


def cmd_transcribe(args: argparse.Namespace, cfg: SearchConfig) -> int:
    _print(f"[transcribe] Transcribing {args.input_audio} with model={cfg.transcribe.model}")
    payload = transcribe_audio_with_word_timestamps(args.input_audio, cfg.transcribe)
    save_json(payload, args.output)
    _print(f"[transcribe] Wrote transcription JSON -> {args.output}")
    return 0


def cmd_search(args: argparse.Namespace, cfg: SearchConfig) -> int:
    context_words = cfg.context_words if args.context is None else args.context
    words = _load_words(args.transcription_json, "search")
    matches = search(words, args.query)
    if args.json:
        print(json.dumps(_matches_jsonable(words, matches, context_words), indent=2, ensure_ascii=False))
        return 0
    if not matches:
        print(f'No matches for "{args.query}"')
        return 0
    for match in matches:
        print(format_match_line(words, match, context_words))
    _print(f"[search] {len(matches)} matches for \"{args.query}\"")
    return 0


def cmd_clip(args: argparse.Namespace, cfg: SearchConfig) -> int:
    padding = cfg.clip_padding if args.padding is None else args.padding
    words = _load_words(args.transcription_json, "clip")
    matches = search(words, args.query)
    _print(f"[clip] {len(matches)} matches for \"{args.query}\" in {args.source_audio}")
    created = cut_match_clips(cfg.ffmpeg_bin, args.source_audio, matches, args.out_dir, padding=padding)
    _print(f"[clip] Created {len(created)} clips in {args.out_dir}")
    return 0


def cmd_export_pdf(args: argparse.Namespace, cfg: SearchConfig) -> int:
    context_words = cfg.context_words if args.context is None else args.context
    words = _load_words(args.transcription_json, "export-pdf")
    matches = search(words, args.query)
    _print(f"[export-pdf] Rendering {len(matches)} matches -> {args.output}")
    export_search_pdf(
        words,
        matches,
        args.query,
        args.output,
        context_words=context_words,
        document_title=args.title,
    )
    _print(f"[export-pdf] Wrote PDF -> {args.output}")
    return 0


def cmd_run_all(args: argparse.Namespace, cfg: SearchConfig) -> int:
    media_path: Path = args.input_media
    if args.work_dir:
        work_dir = args.work_dir
    else:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        work_dir = cfg.output_root / f"{media_path.stem}_{stamp}"
    work_dir.mkdir(parents=True, exist_ok=True)

    audio_path = work_dir / "audio.wav"
    transcription_path = work_dir / "transcription.json"
    matches_path = work_dir / "matches.json"
    clips_dir = work_dir / "clips"

    _print(f"[run-all] Working directory: {work_dir}")
    extract_audio_to_wav(cfg.ffmpeg_bin, media_path, audio_path, sample_rate=args.sample_rate)
    _print(f"[run-all] Audio extracted -> {audio_path}")

    payload = transcribe_audio_with_word_timestamps(audio_path, cfg.transcribe)
    save_json(payload, transcription_path)
    _print(f"[run-all] Transcription written -> {transcription_path}")

    words = extract_words(payload)
    if words.synthetic:
        _print("[run-all] Warning: transcription has no word timestamps; times are estimated at 0.5s per word")
    matches = search(words, args.query)
    save_json(_matches_jsonable(words, matches, cfg.context_words), matches_path)
    _print(f"[run-all] {len(matches)} matches written -> {matches_path}")

    created = cut_match_clips(cfg.ffmpeg_bin, audio_path, matches, clips_dir, padding=cfg.clip_padding)
    _print(f"[run-all] Created {len(created)} clips in {clips_dir}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("transcript_search").setLevel(logging.DEBUG if args.verbose else logging.INFO)

    try:
        cfg = SearchConfig.from_env()
        if args.command == "extract-audio":
            return cmd_extract_audio(args, cfg)
        if args.command == "transcribe":
            return cmd_transcribe(args, cfg)
        if args.command == "search":
            return cmd_search(args, cfg)
        if args.command == "clip":
            return cmd_clip(args, cfg)
        if args.command == "export-pdf":
            return cmd_export_pdf(args, cfg)
        if args.command == "run-all":
            return cmd_run_all(args, cfg)
    except Exception as exc:  # noqa: BLE001
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
