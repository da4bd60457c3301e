"""Best-effort matching of a channel key against stored configuration keys.

Matching runs in three tiers and stops at the first tier that produces a hit:

1. exact, case-insensitive equality;
2. containment, where one key contains the other; the longest shared span wins;
3. token overlap on ``_``-separated tokens of two or more characters.

Ties in tiers 2 and 3 go to the candidate seen first, so the caller controls
precedence through the iteration order of ``candidates``. Tier 3 can produce
false positives on short or generic tokens; treat the result as a hint.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

__all__ = ["find_best_key", "containment_score", "tokenize"]

LOG = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 2


def containment_score(query: str, candidate: str) -> int:
    """Length of the shorter string when one contains the other, else 0."""
    q = query.casefold()
    c = candidate.casefold()
    if c in q:
        return len(candidate)
    if q in c:
        return len(query)
    return 0


def tokenize(key: str) -> frozenset[str]:
    return frozenset(
        token.casefold()
        for token in key.split("_")
        if len(token) >= MIN_TOKEN_LENGTH
    )


def find_best_key(query: str, candidates: Iterable[str]) -> Optional[str]:
    if not query or not query.strip():
        return None
    keys = list(candidates)
    if not keys:
        return None

    folded = query.casefold()
    for key in keys:
        if key.casefold() == folded:
            LOG.debug("Key %s matched exactly", query)
            return key

    best_key: Optional[str] = None
    best_score = 0
    for key in keys:
        score = containment_score(query, key)
        if score > best_score:
            best_key, best_score = key, score
    if best_key is not None:
        LOG.debug("Key %s matched %s by containment (score %d)", query, best_key, best_score)
        return best_key

    query_tokens = tokenize(query)
    if not query_tokens:
        return None
    for key in keys:
        score = len(query_tokens & tokenize(key))
        if score > best_score:
            best_key, best_score = key, score
    if best_key is not None:
        LOG.debug("Key %s matched %s by token overlap (score %d)", query, best_key, best_score)
    return best_key
