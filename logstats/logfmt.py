"""
logfmt decoding for router log lines, e.g.

  2014-01-09T06:16:53+00:00 heroku[router]: at=info method=GET path=/api/users/1/get_messages
    host=example.herokuapp.com fwd="208.54.86.162" dyno=web.8 connect=9ms service=9ms status=200
"""
from typing import Any, Dict, Iterable, Iterator

import logfmt


def parse_line(line: str) -> Dict[str, Any]:
    for record in logfmt.parse([line]):
        return record
    return {}


def parse_lines(lines: Iterable[str]) -> Iterator[Dict[str, Any]]:
    stripped = (line.strip() for line in lines)
    for record in logfmt.parse(line for line in stripped if line):
        if record:
            yield record
