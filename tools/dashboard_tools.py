"""
Dashboard Tools
Candidate list helpers for the interviewer views: filtering, search, sorting and score display.
"""

from typing import List, Dict, Any, Optional, Tuple

SORT_OPTIONS = ("score", "date", "name")
SCORE_RANGES = [(0, 20), (21, 40), (41, 60), (61, 80), (81, 100)]


def get_completed_candidates(candidates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Candidates that finished the interview and have a name on record."""
    return [c for c in candidates if c.get("status") == "completed" and c.get("name")]


def search_and_sort_candidates(candidates: List[Dict[str, Any]], search_term: str = "", sort_by: str = "date") -> List[Dict[str, Any]]:
    """
    Build the interviewer list: completed candidates matching the search term, sorted.

    Args:
        candidates: All candidates from the store
        search_term: Case-insensitive substring of the candidate name
        sort_by: "score" (highest first), "date" (newest first) or "name" (A-Z)

    Returns:
        List[Dict]: Filtered and sorted candidates
    """
    term = (search_term or "").lower()
    results = [c for c in get_completed_candidates(candidates) if term in c["name"].lower()]

    if sort_by == "score":
        results.sort(key=lambda c: c["score"] if c.get("score") is not None else -1, reverse=True)
    elif sort_by == "date":
        results.sort(key=lambda c: c.get("createdAt", 0), reverse=True)
    elif sort_by == "name":
        results.sort(key=lambda c: c["name"].lower())

    return results


def get_score_badge(score: Optional[int]) -> str:
    if score is None:
        return "none"
    if score >= 80:
        return "high"
    if score >= 50:
        return "medium"
    return "low"


def get_score_spread(candidates: List[Dict[str, Any]]) -> Optional[Tuple[int, int]]:
    """(lowest, highest) score among scored candidates, None if nobody has a score."""
    scores = [c["score"] for c in candidates if c.get("score") is not None]
    if not scores:
        return None
    return min(scores), max(scores)


def to_analytics_input(candidates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"id": c["id"], "name": c["name"], "score": c.get("score"), "summary": c.get("summary")}
        for c in candidates
    ]


def compute_score_distribution(candidates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Count scored candidates per range: 0-20, 21-40, 41-60, 61-80, 81-100."""
    counts = [0] * len(SCORE_RANGES)
    for c in candidates:
        score = c.get("score")
        if score is None:
            continue
        for idx, (_, high) in enumerate(SCORE_RANGES):
            if score <= high or idx == len(SCORE_RANGES) - 1:
                counts[idx] += 1
                break
    return [
        {"range": f"{low}-{high}", "count": count}
        for (low, high), count in zip(SCORE_RANGES, counts)
    ]


def compute_average_score(candidates: List[Dict[str, Any]]) -> float:
    scores = [c["score"] for c in candidates if c.get("score") is not None]
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 1)
