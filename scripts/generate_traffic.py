import json
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path

import requests

BASE_URL = "http://127.0.0.1:8000"
HEADERS = {"X-Request-Source": "traffic-script", "Content-Type": "text/plain"}
LOG_FILE_PATH = Path("logs/sample.log")
REPORTS_DIR = Path("reports")
BATCH_SIZE = 200

USER_PATHS = [
    ("GET", "/api/users/{}/count_pending_messages"),
    ("GET", "/api/users/{}/get_messages"),
    ("GET", "/api/users/{}/get_friends_progress"),
    ("GET", "/api/users/{}/get_friends_score"),
    ("POST", "/api/users/{}"),
    ("GET", "/api/users/{}"),
]
# untracked noise the drain should ignore
OTHER_PATHS = [
    ("GET", "/api/online/platforms/facebook_canvas/users/{}/add_ticket"),
    ("POST", "/logs/save_personal_data"),
    ("GET", "/api/users/{}/get_friends_status"),
]
DYNOS = [f"web.{n}" for n in range(1, 12)]


def router_line(at: datetime, method: str, path: str) -> str:
    connect = random.randint(0, 10)
    service = int(random.lognormvariate(3, 0.8))
    # ~1% of lines come through with a broken duration
    if random.random() < 0.01:
        service_field = "service=NaNms"
    else:
        service_field = f"service={service}ms"
    return (
        f"{at.isoformat()} heroku[router]: at=info method={method} path={path} "
        f'host=services.example.com fwd="10.0.{random.randint(0, 255)}.{random.randint(0, 255)}" '
        f"dyno={random.choice(DYNOS)} connect={connect}ms {service_field} "
        f"status=200 bytes={random.randint(100, 5000)}"
    )


def generate_lines(count: int):
    at = datetime(2014, 1, 9, 6, 0, tzinfo=timezone.utc)
    lines = []
    for _ in range(count):
        at += timedelta(milliseconds=random.randint(1, 500))
        method, template = random.choice(USER_PATHS if random.random() < 0.8 else OTHER_PATHS)
        lines.append(router_line(at, method, template.format(random.randint(100000, 9999999999))))
    return lines


def post_batch(lines):
    return requests.post(f"{BASE_URL}/logs", data="\n".join(lines).encode("utf-8"), headers=HEADERS, timeout=5)


def main():
    random.seed(42)

    # 1) Write a sample log that scripts/analyze_logs.py can read offline
    lines = generate_lines(2000)
    LOG_FILE_PATH.parent.mkdir(parents=True, exist_ok=True)
    with LOG_FILE_PATH.open("w", encoding="utf-8") as file:
        file.write("\n".join(lines) + "\n")

    # 2) Drain the same lines into the running service
    ingested = {"received": 0, "tracked": 0, "rejected": 0}
    for start in range(0, len(lines), BATCH_SIZE):
        r = post_batch(lines[start:start + BATCH_SIZE])
        r.raise_for_status()
        for key, value in r.json().items():
            ingested[key] += value

    # 3) Calculate, then fetch the summary
    requests.post(f"{BASE_URL}/calculate", headers=HEADERS, timeout=5).raise_for_status()
    response = requests.get(f"{BASE_URL}/summary", headers=HEADERS, timeout=5)
    response.raise_for_status()
    summary = response.json()
    summary["ingested"] = ingested

    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    with REPORTS_DIR.joinpath("drain_summary.json").open("w", encoding="utf-8") as file:
        json.dump(summary, file, indent=2)


if __name__ == "__main__":
    main()
