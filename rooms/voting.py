from typing import Any, Dict, Iterable, List


def _voted_dates(participant: Any) -> List[str]:
    if isinstance(participant, dict):
        return participant.get("voted_dates") or []
    return getattr(participant, "voted_dates", None) or []


def count_votes(participants: Iterable[Any], date: str) -> int:
    return sum(1 for participant in participants if date in _voted_dates(participant))


def tally(participants: Iterable[Any], candidate_dates: Iterable[str]) -> Dict[str, int]:
    people = list(participants)
    return {date: count_votes(people, date) for date in sorted(candidate_dates)}


def leading_dates(participants: Iterable[Any], candidate_dates: Iterable[str]) -> List[str]:
    """Dates holding the top count. Ties all lead; an all-zero tally has no leader."""
    return leaders(tally(participants, candidate_dates))


def leaders(counts: Dict[str, int]) -> List[str]:
    if not counts:
        return []
    top = max(counts.values())
    if top <= 0:
        return []
    return [date for date, votes in counts.items() if votes == top]
