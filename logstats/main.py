import time
from uuid import uuid4
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response, HTTPException
from fastapi.responses import JSONResponse

from logstats.aggregator import calculate, track
from logstats.logfmt import parse_lines
from logstats.report import STALE_WARNING, summary_rows
from logstats.store import AggregationStore, StatsNotCalculatedError
from logstats.telemetry import JsonlLogger

EVENT_LOG_PATH = "logs/events.jsonl"


def create_app(store: Optional[AggregationStore] = None, logger: Optional[JsonlLogger] = None) -> FastAPI:
    """
    Log drain service: router log lines are POSTed to /logs, aggregated into
    `store`, and summarised once /calculate has been called.

    Handlers are all `async def` so ingestion and calculation run one at a
    time on the event loop; the store itself takes no locks.
    """
    app = FastAPI(title="logstats drain")
    app.state.store = store if store is not None else AggregationStore()
    app.state.logger = logger if logger is not None else JsonlLogger(filepath=EVENT_LOG_PATH)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        request_id = str(uuid4())
        start = time.perf_counter()

        status_code = 500
        error_message = None

        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            error_message = f"{type(e).__name__}: {e}"
            return JSONResponse(status_code=500, content={"error": "unhandled_exception"})
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            event = {
                "event_type": "http_request",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "latency_ms": round(elapsed_ms, 2),
            }
            if error_message:
                event["error"] = error_message
            app.state.logger.log(event)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/logs")
    async def ingest_logs(request: Request):
        """
        Accepts a batch of newline separated logfmt lines, e.g. from a log drain.
        """
        body = (await request.body()).decode("utf-8", errors="replace")
        store: AggregationStore = app.state.store

        hits_before = sum(a.hits for a in store.endpoints.values())
        rejected_before = store.rejected
        received = 0
        for record in parse_lines(body.splitlines()):
            received += 1
            track(store, record)

        result = {
            "received": received,
            "tracked": sum(a.hits for a in store.endpoints.values()) - hits_before,
            "rejected": store.rejected - rejected_before,
        }
        app.state.logger.event("logs_ingested", **result)
        return result

    @app.post("/calculate")
    async def run_calculate():
        store: AggregationStore = app.state.store
        calculate(store)
        app.state.logger.event("stats_calculated", endpoints=len(store.endpoints))
        return {"status": "calculated", "endpoints": len(store.endpoints)}

    @app.get("/summary")
    async def summary():
        store: AggregationStore = app.state.store
        try:
            rows = summary_rows(store)
        except StatsNotCalculatedError as e:
            raise HTTPException(status_code=409, detail=str(e))

        payload: Dict[str, Any] = {
            "stale": store.dirty,
            "rejected": store.rejected,
            "endpoints": rows,
        }
        if store.dirty:
            payload["warning"] = STALE_WARNING
            app.state.logger.event("summary_stale", endpoints=len(rows))
        return payload

    return app


app = create_app()
