# one JSON line per request: method / path / query / status; IP; handling time
# 5xx and slow requests are logged as warnings; never touches the DB

import time
from fastapi import Request
import json
import logging

logger = logging.getLogger("backend.requests")

SLOW_REQUEST_MS = 1000


async def request_log_middleware(request: Request, call_next):
    start_ts = time.time()

    response = await call_next(request)

    duration_ms = int((time.time() - start_ts) * 1000)

    record = {
        "ts": int(start_ts),
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query or None,
        "status": response.status_code,
        "ip": request.headers.get("X-Real-IP") or (request.client.host if request.client else None),
        "duration_ms": duration_ms,
    }

    if response.status_code >= 500 or duration_ms >= SLOW_REQUEST_MS:
        logger.warning(json.dumps(record, ensure_ascii=False))
    else:
        logger.info(json.dumps(record, ensure_ascii=False))

    return response
