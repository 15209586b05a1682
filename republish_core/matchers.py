"""Recognise "version already published" failures in npm output."""

from __future__ import annotations

import re
from typing import Callable, Iterable, Sequence

__all__ = [
    "AlreadyPublishedMatcher",
    "ARTIFACTORY_PHRASE",
    "NPMJS_PHRASE",
    "DEFAULT_MATCHERS",
    "phrase_matcher",
    "pattern_matcher",
    "build_matchers",
    "is_already_published",
]

AlreadyPublishedMatcher = Callable[[str], bool]

ARTIFACTORY_PHRASE = "forbidden cannot modify pre-existing version"
NPMJS_PHRASE = "cannot publish over the previously published versions"


def phrase_matcher(phrase: str) -> AlreadyPublishedMatcher:
    """Match when ``phrase`` occurs verbatim in the output."""

    if not phrase:
        raise ValueError("phrase cannot be empty")

    def _match(text: str) -> bool:
        return phrase in text

    _match.__name__ = f"phrase_matcher({phrase!r})"
    return _match


def pattern_matcher(pattern: str | re.Pattern[str], flags: int = 0) -> AlreadyPublishedMatcher:
    compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern

    def _match(text: str) -> bool:
        return compiled.search(text) is not None

    _match.__name__ = f"pattern_matcher({compiled.pattern!r})"
    return _match


DEFAULT_MATCHERS: tuple[AlreadyPublishedMatcher, ...] = (
    phrase_matcher(ARTIFACTORY_PHRASE),
    phrase_matcher(NPMJS_PHRASE),
)


def build_matchers(extra_phrases: Iterable[str] = ()) -> tuple[AlreadyPublishedMatcher, ...]:
    """Default matchers followed by one phrase matcher per extra phrase."""

    extra = tuple(phrase_matcher(phrase) for phrase in extra_phrases if phrase.strip())
    return (*DEFAULT_MATCHERS, *extra)


def is_already_published(
    outputs: Sequence[str],
    matchers: Sequence[AlreadyPublishedMatcher] = DEFAULT_MATCHERS,
) -> bool:
    return any(matcher(text) for text in outputs if text for matcher in matchers)
