"""Name similarity used to decide whether two grocery lines are the same ingredient."""

from rapidfuzz.distance import Levenshtein

# Strict on purpose: catches whitespace, plurals and typos in long names,
# keeps "fresh tomatoes" and "canned tomatoes" apart.
SIMILARITY_THRESHOLD = 0.95


def name_similarity(a: str, b: str) -> float:
    """
    Normalized Levenshtein similarity between two ingredient names.

    Case-insensitive exact matches score 1.0. Otherwise the score is
    ``(max_len - edit_distance) / max_len`` over the lowercased, trimmed names.
    """
    left = a.strip().lower()
    right = b.strip().lower()
    if left == right:
        return 1.0

    max_len = max(len(left), len(right))
    distance = Levenshtein.distance(left, right)
    return (max_len - distance) / max_len


def is_same_ingredient(a: str, b: str, threshold: float = SIMILARITY_THRESHOLD) -> bool:
    """Check whether two names are close enough to merge."""
    return name_similarity(a, b) >= threshold
