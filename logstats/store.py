from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

SIGNATURE_SEPARATOR = "::"


class StatsNotCalculatedError(RuntimeError):
    """Raised when results are read before calculate() has ever run."""


class TrackedSignature(NamedTuple):
    method: str
    template: str

    @classmethod
    def parse(cls, key: str) -> "TrackedSignature":
        method, sep, template = key.strip().partition(SIGNATURE_SEPARATOR)
        if not sep or not method or not template:
            raise ValueError(f"invalid tracked request {key!r}, expected METHOD{SIGNATURE_SEPARATOR}TEMPLATE")
        return cls(method.upper(), template)

    def __str__(self) -> str:
        return f"{self.method}{SIGNATURE_SEPARATOR}{self.template}"


# The requests we want stats for (method + templated url).
TRACKED_REQUESTS = (
    TrackedSignature("GET", "/api/users/{user_id}/count_pending_messages"),
    TrackedSignature("GET", "/api/users/{user_id}/get_messages"),
    TrackedSignature("GET", "/api/users/{user_id}/get_friends_progress"),
    TrackedSignature("GET", "/api/users/{user_id}/get_friends_score"),
    TrackedSignature("POST", "/api/users/{user_id}"),
    TrackedSignature("GET", "/api/users/{user_id}"),
)


class EndpointAggregate:
    def __init__(self, sample: int, worker_id: str) -> None:
        self.hits = 1
        self.response_times: List[int] = [sample]
        self.worker_counts: Dict[str, int] = {worker_id: 1}
        # filled in by calculate()
        self.analysis: Optional[Dict[str, Any]] = None
        self.top_worker: Optional[Dict[str, Any]] = None

    def add(self, sample: int, worker_id: str) -> None:
        self.hits += 1
        self.response_times.append(sample)
        self.worker_counts[worker_id] = self.worker_counts.get(worker_id, 0) + 1


class AggregationStore:
    """
    Per-endpoint aggregates for one run, plus the two run-wide flags:

      dirty       records were tracked since the last calculate()
      calculated  calculate() has run at least once (never cleared)

    Example shape of `endpoints` after calculate():

      {
        TrackedSignature("GET", "/api/users/{user_id}"): EndpointAggregate(
          hits=3,
          response_times=[10, 39, 45],
          worker_counts={"web.6": 1, "web.4": 2},
          analysis={"mean": 31.333, "median": 39, "mode": [10, 39, 45]},
          top_worker={"id": "web.4", "count": 2},
        ),
      }
    """

    def __init__(self, tracked: Optional[Iterable[Union[str, TrackedSignature]]] = None) -> None:
        if tracked is None:
            tracked = TRACKED_REQUESTS
        self.tracked = frozenset(
            s if isinstance(s, TrackedSignature) else TrackedSignature.parse(s) for s in tracked
        )
        self.endpoints: Dict[TrackedSignature, EndpointAggregate] = {}
        self.dirty = False
        self.calculated = False
        # tracked-signature records dropped for unparseable durations
        self.rejected = 0

    def results(self) -> Dict[TrackedSignature, EndpointAggregate]:
        if not self.calculated:
            raise StatsNotCalculatedError("calculate() must be run before reading endpoint stats")
        return self.endpoints


def load_tracked_requests(lines: Iterable[str]) -> List[TrackedSignature]:
    """
    Reads an allow-list with one METHOD::TEMPLATE per line.
    Blank lines and lines starting with '#' are skipped.
    """
    signatures = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        signatures.append(TrackedSignature.parse(line))
    return signatures
