from collections.abc import Sequence
from difflib import get_close_matches

from questlog.core.errors import AmbiguousError
from questlog.core.models import Quest

__all__ = ["find_in_pool"]

FUZZY_MATCH_CUTOFF = 0.8


def _match_uuid_prefix(ref: str, pool: Sequence[Quest]) -> Quest | None:
    ref_lower = ref.lower()
    matches = [q for q in pool if q.id.startswith(ref_lower)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        exact = next((q for q in matches if q.id == ref), None)
        if exact:
            return exact
        sample = [q.id[:8] for q in matches[:3]]
        raise AmbiguousError(ref, count=len(matches), sample=sample)
    return None


def _match_substring(ref: str, pool: Sequence[Quest]) -> Quest | None:
    ref_lower = ref.lower()
    exact = next((q for q in pool if q.title.lower() == ref_lower), None)
    if exact:
        return exact
    matches = [q for q in pool if ref_lower in q.title.lower()]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        sample = [q.title for q in matches[:3]]
        raise AmbiguousError(ref, count=len(matches), sample=sample)
    return None


def _match_fuzzy(ref: str, pool: Sequence[Quest]) -> Quest | None:
    titles = [q.title.lower() for q in pool]
    matches = get_close_matches(ref.lower(), titles, n=1, cutoff=FUZZY_MATCH_CUTOFF)
    if matches:
        return next(q for q in pool if q.title.lower() == matches[0])
    return None


def find_in_pool(ref: str, pool: Sequence[Quest]) -> Quest | None:
    if not pool or not ref:
        return None
    return _match_uuid_prefix(ref, pool) or _match_substring(ref, pool) or _match_fuzzy(ref, pool)
