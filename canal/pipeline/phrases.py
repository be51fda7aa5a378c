"""Salient phrase mining over job titles.

Pipeline per subset:
  1. Normalize each title (punctuation -> space, ASCII letters only, lower-case).
  2. Drop stop words and tokens shorter than ``min_token_length``.
  3. Collect the distinct n-grams of every title (n in min_ngram..max_ngram).
  4. Support = number of titles containing the phrase; keep support >= min_support.
  5. Sort by support desc (ties keep first-seen order).
  6. Containment dedup against phrases already kept.
  7. Stop at ``max_phrases`` and title-case for display.
"""

import logging
import re
from collections.abc import Iterable, Sequence

from canal.core.config import PhraseConfig
from canal.core.schemas import JobRecord, PhraseCount

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[-/,()]")
_NON_LETTERS = re.compile(r"[^A-Za-z\s]")


def tokenize(
    title: str,
    config: PhraseConfig | None = None,
    stop_words: frozenset[str] | None = None,
) -> list[str]:
    """Normalize a title into eligible tokens.

    Callers tokenizing many titles pass a prebuilt ``stop_words`` set;
    otherwise it is taken from ``config``.

    >>> tokenize("Sr. Data-Center Engineer (Remote)")
    ['data', 'center', 'engineer']
    """
    config = config or PhraseConfig()
    if stop_words is None:
        stop_words = frozenset(config.stop_words)
    text = _SEPARATORS.sub(" ", title)
    text = _NON_LETTERS.sub("", text).lower()
    return [
        tok for tok in text.split()
        if len(tok) >= config.min_token_length and tok not in stop_words
    ]


def title_ngrams(tokens: Sequence[str], min_n: int, max_n: int) -> list[str]:
    """Distinct contiguous n-grams of ``tokens`` in first-seen order."""
    grams: dict[str, None] = {}
    for n in range(min_n, max_n + 1):
        for start in range(len(tokens) - n + 1):
            grams.setdefault(" ".join(tokens[start:start + n]), None)
    return list(grams)


def count_support(titles: Iterable[str], config: PhraseConfig | None = None) -> dict[str, int]:
    """Map phrase -> number of titles it appears in (insertion = first-seen order)."""
    config = config or PhraseConfig()
    stop_words = frozenset(config.stop_words)
    support: dict[str, int] = {}
    for title in titles:
        tokens = tokenize(title, config, stop_words)
        for gram in title_ngrams(tokens, config.min_ngram, config.max_ngram):
            support[gram] = support.get(gram, 0) + 1
    return support


def dedupe_phrases(
    ranked: Sequence[tuple[str, int]],
    limit: int,
) -> list[tuple[str, int]]:
    """Containment dedup over phrases already sorted by support desc.

    A candidate is dropped when it is contained in a kept phrase, or when it
    contains a kept phrase whose support is at least its own. Support is
    compared raw, without weighting by phrase length, so a shorter phrase
    with equal support suppresses the longer one.
    """
    kept: list[tuple[str, int]] = []
    for phrase, support in ranked:
        if len(kept) >= limit:
            break
        redundant = False
        for kept_phrase, kept_support in kept:
            if phrase in kept_phrase:
                redundant = True
                break
            if kept_phrase in phrase and support <= kept_support:
                redundant = True
                break
        if not redundant:
            kept.append((phrase, support))
    return kept


def title_case(phrase: str) -> str:
    """Upper-case the first letter of every word."""
    return " ".join(word[:1].upper() + word[1:] for word in phrase.split())


def extract_phrases(
    records: Sequence[JobRecord],
    config: PhraseConfig | None = None,
) -> list[PhraseCount]:
    """Ranked salient title phrases for a subset.

    Returns an empty list for subsets smaller than ``min_support``.
    """
    config = config or PhraseConfig()
    if len(records) < config.min_support:
        return []

    support = count_support((r.title for r in records), config)
    eligible = [(p, s) for p, s in support.items() if s >= config.min_support]
    eligible.sort(key=lambda item: item[1], reverse=True)

    kept = dedupe_phrases(eligible, config.max_phrases)
    logger.debug(
        "Phrases: %d candidates, %d with support >= %d, %d kept",
        len(support), len(eligible), config.min_support, len(kept),
    )
    return [PhraseCount(phrase=title_case(p), support=s) for p, s in kept]
