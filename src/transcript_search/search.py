from __future__ import annotations

import logging
import re
from typing import Any, Sequence

from .models import MatchResult, TimedWord
from .transcript import extract_words


logger = logging.getLogger(__name__)

PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")
START_TOLERANCE = 0.1
DEFAULT_CONTEXT_WORDS = 5


def normalize(word: str) -> str:
    return PUNCTUATION_RE.sub("", word.lower())


def _search_term(words: Sequence[TimedWord], term: str) -> list[MatchResult]:
    matches: list[MatchResult] = []
    for idx, word in enumerate(words):
        normalized = normalize(word.text)
        if normalized == term or term in normalized:
            logger.debug("Match found: %r at %.3f", word.text, word.start)
            matches.append(MatchResult(text=word.text, start=word.start, end=word.end, word_index=idx))
    return matches


def _search_phrase(words: Sequence[TimedWord], terms: list[str]) -> list[MatchResult]:
    matches: list[MatchResult] = []
    span = len(terms)
    for idx in range(len(words) - span + 1):
        window = words[idx : idx + span]
        # Sub-terms match by containment, so "art work" also hits "cart worker".
        if all(term in normalize(word.text) for word, term in zip(window, terms)):
            phrase = " ".join(word.text for word in window)
            logger.debug("Phrase match found: %r at %.3f", phrase, window[0].start)
            matches.append(
                MatchResult(text=phrase, start=window[0].start, end=window[-1].end, word_index=idx)
            )
    return matches


def search(words: Sequence[TimedWord], query: str) -> list[MatchResult]:
    """Find every occurrence of `query` in `words`, in word order.

    A query without spaces matches any word whose normalized form contains
    it. A query with spaces is matched as a phrase: consecutive words must
    each contain the corresponding query term. Phrase windows slide one word
    at a time, so overlapping matches are all reported.
    """
    query = query.strip()
    if not query or not words:
        return []

    normalized_query = normalize(query)
    if not normalized_query:
        return []
    logger.debug("Sample words: %s", [(w.text, w.start, w.end) for w in words[:3]])

    if " " not in normalized_query:
        logger.debug("Searching %s words for term %r", len(words), normalized_query)
        matches = _search_term(words, normalized_query)
    else:
        terms = normalized_query.split(" ")
        logger.debug("Searching %s words for phrase terms %s", len(words), terms)
        matches = _search_phrase(words, terms)

    logger.debug("Search for %r returned %s matches", query, len(matches))
    return matches


def search_transcription(transcription: Any, query: str) -> list[MatchResult]:
    if transcription is None or not query or not query.strip():
        return []
    return search(extract_words(transcription), query)


def _anchor_index(words: Sequence[TimedWord], match: MatchResult) -> int | None:
    idx = match.word_index
    if idx is not None and 0 <= idx < len(words) and abs(words[idx].start - match.start) < START_TOLERANCE:
        return idx
    for idx, word in enumerate(words):
        if abs(word.start - match.start) < START_TOLERANCE:
            return idx
    return None


def context_around(
    words: Sequence[TimedWord],
    match: MatchResult,
    context_words: int = DEFAULT_CONTEXT_WORDS,
) -> str:
    """Return the match surrounded by up to `context_words` words on each side.

    Falls back to the match text itself when the match cannot be located.
    """
    if not words:
        return match.text
    idx = _anchor_index(words, match)
    if idx is None:
        return match.text

    context_words = max(0, context_words)
    match_word_count = len(match.text.split(" "))
    first = max(0, idx - context_words)
    last = min(len(words) - 1, idx + match_word_count + context_words - 1)
    return " ".join(word.text for word in words[first : last + 1])
