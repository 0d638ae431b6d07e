import re
from typing import Any, Mapping, Optional

from logstats.analyzer import argmax_count, response_time_stats
from logstats.store import AggregationStore, EndpointAggregate, TrackedSignature

# picks out the requests of interest; group 1 is the user id
ENDPOINT_PATTERN = re.compile(
    r"/api/users/(\d+)"
    r"(/(?:count_pending_messages|get_messages|get_friends_progress|get_friends_score))?"
)
USER_ID_PLACEHOLDER = "{user_id}"
UNIT_SUFFIX_LENGTH = 2  # "ms"
WORKER_FIELD = "dyno"
UNKNOWN_WORKER = "unknown"
DIGITS_PATTERN = re.compile(r"\d+", re.ASCII)


def signature_for(method: Any, path: Any) -> Optional[TrackedSignature]:
    if not isinstance(path, str):
        return None
    match = ENDPOINT_PATTERN.search(path)
    if not match:
        return None

    template = path[:match.start(1)] + USER_ID_PLACEHOLDER + path[match.end(1):]
    return TrackedSignature(str(method), template)


def parse_duration(value: Any) -> Optional[int]:
    """
    "12ms" -> 12. Returns None when the value is missing or not an integer
    once the unit suffix is stripped.
    """
    if not isinstance(value, str) or len(value) <= UNIT_SUFFIX_LENGTH:
        return None
    digits = value[:-UNIT_SUFFIX_LENGTH]
    if not DIGITS_PATTERN.fullmatch(digits):
        return None
    return int(digits)


def track(store: AggregationStore, record: Mapping[str, Any]) -> None:
    """
    Adds one decoded log record to the store.

    Records outside the tracked requests are ignored. A tracked record with
    an unparseable connect/service duration is rejected whole (counted in
    store.rejected) so hits, samples and worker counts stay in step.
    """
    signature = signature_for(record.get("method"), record.get("path"))
    if signature is None or signature not in store.tracked:
        return

    connect = parse_duration(record.get("connect"))
    service = parse_duration(record.get("service"))
    if connect is None or service is None:
        store.rejected += 1
        return

    sample = connect + service
    worker_id = record.get(WORKER_FIELD)
    if not isinstance(worker_id, str) or not worker_id:
        worker_id = UNKNOWN_WORKER

    aggregate = store.endpoints.get(signature)
    if aggregate is None:
        store.endpoints[signature] = EndpointAggregate(sample, worker_id)
    else:
        aggregate.add(sample, worker_id)

    store.dirty = True


def calculate(store: AggregationStore) -> None:
    """
    Runs the analysis over everything tracked so far. Must run before the
    store's results are presented; re-running overwrites earlier results.
    """
    for aggregate in store.endpoints.values():
        aggregate.analysis = response_time_stats(aggregate.response_times, aggregate.hits)
        aggregate.top_worker = argmax_count(aggregate.worker_counts)

    store.dirty = False
    store.calculated = True
