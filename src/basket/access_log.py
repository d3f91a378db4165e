"""
=============================================================================
ACCESS LOG
=============================================================================

The router writes one line per exchange to the ``basket.access`` logger:

    2026-01-01 12:00:00 [INFO] basket.access: 127.0.0.1:53122 "GET /hello" 200 13 0.42ms
                                              ───────┬─────── ─────┬───── ─┬─ ┬─ ──┬───
                                                     │             │       │  │    └── handler time
                                                     │             │       │  └─────── body bytes
                                                     │             │       └────────── status
                                                     │             └────────────────── method + target
                                                     └──────────────────────────────── peer

The logger is separate from the module loggers so it can be routed on its
own:

    logging.getLogger("basket.access").addHandler(file_handler)
    logging.getLogger("basket.access").propagate = False
=============================================================================
"""

import logging
from dataclasses import dataclass


logger = logging.getLogger("basket.access")


@dataclass
class RequestLog:
    """One handled exchange."""

    client: str
    method: str
    target: str
    status: int
    content_length: int
    duration_ms: float

    def to_text(self) -> str:
        return (
            f'{self.client} "{self.method} {self.target}" {self.status} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog, level: int = logging.INFO) -> None:
    """Write ``entry`` to the access logger."""
    logger.log(level, entry.to_text())
