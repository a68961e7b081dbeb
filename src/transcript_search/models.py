from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(frozen=True)
class TimedWord:
    text: str
    start: float
    end: float


@dataclass(frozen=True)
class WordSequence:
    """Flat, time-ordered words resolved from one transcription.

    `synthetic` is True when the timings are placeholders derived from plain
    text rather than timestamps reported by the transcription provider.
    """

    words: tuple[TimedWord, ...] = ()
    synthetic: bool = False

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[TimedWord]:
        return iter(self.words)

    def __getitem__(self, index: int) -> TimedWord:
        return self.words[index]

    def __bool__(self) -> bool:
        return bool(self.words)


@dataclass(frozen=True)
class MatchResult:
    text: str
    start: float
    end: float
    # Index of the first matched word in the sequence the match was found in.
    word_index: int | None = field(default=None, compare=False, repr=False)
