"""Logging setup and the structured JSON run log."""

import json
import logging
import time
import uuid

from reconciler.config import Settings, settings as default_settings

logger = logging.getLogger("recon.run")


def configure_logging(settings: Settings | None = None) -> None:
    """Logging setup for applications that embed the engine.

    The library never calls this itself: the embedding program owns the root
    logger and calls it once at startup. The ``recon`` logger level is always
    applied, even when the root logger already has handlers.
    """
    settings = settings or default_settings
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    )
    logging.getLogger("recon").setLevel(level)


class RunLog:
    """Times one validation run and emits a single JSON log line on exit.

    The run id only appears in the log, never in the report.
    """

    def __init__(self, document_count: int, environment: str = "development"):
        self.run_id = str(uuid.uuid4())[:8]
        self.document_count = document_count
        self.environment = environment
        self.fields: dict = {}
        self._start = 0.0

    def record(self, **fields) -> None:
        self.fields.update(fields)

    def __enter__(self) -> "RunLog":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        duration_ms = round((time.perf_counter() - self._start) * 1000, 1)
        log_data = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            "run_id": self.run_id,
            "environment": self.environment,
            "documents": self.document_count,
            "status": "failed" if exc_type else "ok",
            "duration_ms": duration_ms,
            **self.fields,
        }
        if exc_type:
            log_data["error"] = exc_type.__name__
            logger.error(json.dumps(log_data))
        else:
            logger.info(json.dumps(log_data))
        return False
