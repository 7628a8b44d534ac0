"""
String similarity scoring for material names.

Two scorers, both on a 0-100 scale:

- vocabulary_similarity: strict scorer used to snap model output onto the
  fixed vocabulary. Only exact matches and substring containment count.
- catalog_similarity: composite scorer used against the live catalog.
  Blends containment, word overlap with positional proximity, and
  character-position agreement.

The constants below are empirical. Thresholds that decide acceptance live in
match_config.json.
"""

import re
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

# Containment scoring for the catalog scorer: (minimum length ratio, floor)
CONTAINMENT_FLOORS = (
    (0.8, 88.0),
    (0.6, 78.0),
    (0.4, 70.0),
    (0.0, 65.0),
)
CONTAINMENT_BASE = 60.0
CONTAINMENT_SPAN = 35.0
CONTAINMENT_CAP = 95.0

WORD_WEIGHT = 0.7
CHAR_WEIGHT = 0.3
POSITION_BONUS = 0.2
PARTIAL_WORD_CREDIT = 0.8
MIN_PARTIAL_WORD_LEN = 3

# Vocabulary scorer
VOCAB_SUBSTRING_SCORE = 90.0
VOCAB_GENERIC_FLOOR = 70.0
VOCAB_GENERIC_RATIO = 0.6
VOCAB_GENERIC_SCALE = 85.0


def normalize_name(name: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace. Arabic letters survive."""
    if not name:
        return ""
    name = name.lower().strip()
    name = re.sub(r"[^\w\s]", "", name)
    name = re.sub(r"\s+", " ", name).strip()
    return name


def is_substring_match(a: str, b: str) -> bool:
    """True when either normalized name contains the other."""
    n1, n2 = normalize_name(a), normalize_name(b)
    if not n1 or not n2:
        return False
    return n1 in n2 or n2 in n1


def specificity(name: str) -> tuple[int, int]:
    """Sort key for how specific a name is: word count, then length."""
    normalized = normalize_name(name)
    return len(normalized.split()), len(normalized)


def _length_ratio(a: str, b: str) -> float:
    return min(len(a), len(b)) / max(len(a), len(b))


# ---------------------------------------------------------------------------
# Vocabulary scorer
# ---------------------------------------------------------------------------

def vocabulary_similarity(text: str, candidate: str) -> float:
    """
    Score a raw model string against one vocabulary name.

    Exact match scores 100. Substring containment scores 90 when lengths are
    comparable and falls toward 70 for generic short matches. Anything else
    scores 0.
    """
    a = (text or "").strip().lower()
    b = (candidate or "").strip().lower()
    if not a or not b:
        return 0.0
    if a == b:
        return 100.0

    if b in a or a in b:
        ratio = _length_ratio(a, b)
        if ratio < VOCAB_GENERIC_RATIO:
            return max(VOCAB_GENERIC_FLOOR, ratio * VOCAB_GENERIC_SCALE)
        return VOCAB_SUBSTRING_SCORE

    return 0.0


def best_vocabulary_match(
    text: str,
    candidates: Sequence[str],
    threshold: float = 80,
    tie_window: float = 5,
) -> Optional[tuple[str, float]]:
    """
    Find the best vocabulary candidate for a raw model string.

    Candidates within tie_window points of the leader are ranked by
    specificity, so "plastic bottles" beats "plastic" when both contain the
    input equally well.

    Returns:
        (candidate, score) or None if nothing reaches the threshold
    """
    scored = []
    for candidate in candidates:
        score = vocabulary_similarity(text, candidate)
        if score == 100.0:
            return candidate, score
        if score >= threshold:
            scored.append((score, candidate))

    if not scored:
        return None

    top_score = max(score for score, _ in scored)
    contenders = [(s, c) for s, c in scored if top_score - s <= tie_window]
    contenders.sort(key=lambda sc: (len(sc[1]), sc[0]), reverse=True)
    best_score, best = contenders[0]
    return best, best_score


# ---------------------------------------------------------------------------
# Catalog scorer
# ---------------------------------------------------------------------------

def _containment_score(n1: str, n2: str) -> float:
    ratio = _length_ratio(n1, n2)
    score = CONTAINMENT_BASE + CONTAINMENT_SPAN * ratio
    for min_ratio, floor in CONTAINMENT_FLOORS:
        if ratio >= min_ratio:
            score = max(score, floor)
            break
    return min(score, CONTAINMENT_CAP)


def _word_overlap_score(n1: str, n2: str) -> float:
    """
    Shared-word score with a bonus for words at corresponding positions.

    Each word of n1 takes its best partner in n2: 1.0 for equal words,
    PARTIAL_WORD_CREDIT when one contains the other. Partners at the same
    relative position earn up to POSITION_BONUS more.
    """
    words1 = n1.split()
    words2 = n2.split()
    if not words1 or not words2:
        return 0.0

    span = max(len(words1), len(words2))
    total = 0.0
    for i, w1 in enumerate(words1):
        best = 0.0
        for j, w2 in enumerate(words2):
            if w1 == w2:
                base = 1.0
            elif min(len(w1), len(w2)) >= MIN_PARTIAL_WORD_LEN and (w1 in w2 or w2 in w1):
                base = PARTIAL_WORD_CREDIT
            else:
                continue
            proximity = 1 - abs(i - j) / span
            best = max(best, base + POSITION_BONUS * proximity)
        total += best

    return min(100.0, total / (span * (1 + POSITION_BONUS)) * 100)


def _char_position_score(n1: str, n2: str) -> float:
    """Characters equal at the same index, over the longer length."""
    common = sum(1 for a, b in zip(n1, n2) if a == b)
    return common / max(len(n1), len(n2)) * 100


def catalog_similarity(str1: str, str2: str) -> float:
    """
    Composite similarity between an extracted name and a catalog name.

    Returns a 0-100 score, rounded to two decimals.
    """
    n1 = normalize_name(str1)
    n2 = normalize_name(str2)
    if not n1 or not n2:
        return 0.0
    if n1 == n2:
        return 100.0

    if n1 in n2 or n2 in n1:
        return round(_containment_score(n1, n2), 2)

    word_score = _word_overlap_score(n1, n2)
    char_score = _char_position_score(n1, n2)
    return round(WORD_WEIGHT * word_score + CHAR_WEIGHT * char_score, 2)


def pick_best_candidate(
    candidates: list[tuple[float, str, T]],
    query: str,
    window: float = 8,
    min_gap: float = 3,
) -> Optional[tuple[float, str, T]]:
    """
    Choose between scored candidates.

    Args:
        candidates: (score, name, payload) tuples that already passed the threshold
        query: The name being resolved
        window: Score gap within which the top two are a close race
        min_gap: Lead a less specific, non-substring leader needs to keep the win

    Returns:
        The winning tuple, or None if there are no candidates

    In a close race the more specific name wins, unless the less specific
    one is the raw leader, is not a substring match of the query, and leads
    by at least min_gap.
    """
    if not candidates:
        return None

    ranked = sorted(candidates, key=lambda c: c[0], reverse=True)
    top = ranked[0]
    if len(ranked) == 1:
        return top

    runner_up = ranked[1]
    gap = top[0] - runner_up[0]
    if gap > window:
        return top

    if specificity(runner_up[1]) <= specificity(top[1]):
        return top

    if not is_substring_match(query, top[1]) and gap >= min_gap:
        return top
    return runner_up
