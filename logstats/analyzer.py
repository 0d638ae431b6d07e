from collections import Counter
from numbers import Number
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence


def calculate_mean(sorted_times: Sequence[int], hits: Any) -> Optional[float]:
    if not sorted_times or isinstance(hits, bool) or not isinstance(hits, Number) or hits <= 0:
        return None
    return sum(sorted_times) / hits


def calculate_median(sorted_times: Sequence[int]) -> Optional[float]:
    if not sorted_times:
        return None

    midpoint = len(sorted_times) // 2
    if len(sorted_times) % 2:
        return sorted_times[midpoint]
    return (sorted_times[midpoint - 1] + sorted_times[midpoint]) / 2


def calculate_mode(sorted_times: Sequence[int]) -> Optional[List[int]]:
    """
    Every value sharing the highest frequency, in first-occurrence order.
    """
    if not sorted_times:
        return None

    counts = Counter(sorted_times)
    top = max(counts.values())
    return [value for value, count in counts.items() if count == top]


def response_time_stats(samples: Sequence[int], hits: Any) -> Dict[str, Any]:
    """
    Mean, median and mode for one endpoint's response times.

    `samples` is left untouched; the statistics run over a sorted copy.
    The mean divides by `hits` rather than len(samples), so callers must
    pass the count that produced the samples.
    """
    sorted_times = sorted(samples)
    return {
        "mean": calculate_mean(sorted_times, hits),
        "median": calculate_median(sorted_times),
        "mode": calculate_mode(sorted_times),
    }


def argmax_count(counts: Mapping[Hashable, int]) -> Dict[str, Any]:
    top = {"id": None, "count": None}

    for key, count in counts.items():
        # strict comparison: an equal count never displaces the current leader
        if top["count"] is None or count > top["count"]:
            top["id"] = key
            top["count"] = count

    return top
