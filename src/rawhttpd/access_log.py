"""
=============================================================================
ACCESS LOG
=============================================================================

One line per response written, on the "rawhttpd.access" logger.

    TEXT FORMAT (default, Apache-like):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [18/Oct/2026:10:55:36 +0000] "GET /echo/hi" 200 2 0.41ms│
    │ IP             Timestamp                   Method/Target Status Size │
    └─────────────────────────────────────────────────────────────────────┘

    JSON FORMAT (one object per line, for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "a1b2c3d4", "method": "GET", "target": "/echo/hi",   │
    │  "client_ip": "127.0.0.1", "user_agent": "curl/8.4.0",              │
    │  "status_code": 200, "content_length": 2, "duration_ms": 0.41, ...} │
    └─────────────────────────────────────────────────────────────────────┘

Requests that never parsed (400) are logged with "-" for method, target
and user agent.

The logger is separate from the module loggers so it can be routed on its
own:

    logging.getLogger("rawhttpd.access").addHandler(file_handler)

=============================================================================
"""

import json
import time
import logging
from dataclasses import dataclass
from typing import Optional

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("rawhttpd.access")


@dataclass
class RequestLog:
    """
    Structured access log entry.

    request_id:     Connection id, ties this line to the debug logs
    method:         Request method, "-" if the request didn't parse
    target:         Raw request target
    client_ip:      Peer address
    user_agent:     User-Agent header, "-" if absent
    status_code:    Status written
    content_length: Response body size in bytes
    duration_ms:    Time from complete request to response bytes ready
    timestamp:      Apache-style local time
    """

    request_id: str
    method: str
    target: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @classmethod
    def create(
        cls,
        request_id: str,
        client_ip: str,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        duration_ms: float,
    ) -> "RequestLog":
        return cls(
            request_id=request_id,
            method=request.method if request else "-",
            target=request.target if request else "-",
            client_ip=client_ip,
            user_agent=(request.user_agent if request else "") or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "method": self.method,
            "target": self.target,
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog, log_format: str = "text") -> None:
    """Emit entry on the access logger at INFO."""
    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())
