import logging
import time

import httpx

logger = logging.getLogger(__name__)

_STARTED = "portal.started"


async def mark_request_start(request: httpx.Request) -> None:
    request.extensions[_STARTED] = time.monotonic()


async def log_response(response: httpx.Response) -> None:
    request = response.request
    started = request.extensions.get(_STARTED)
    duration = time.monotonic() - started if started is not None else 0.0
    logger.info(
        "%s %s -> %s (%.2fs)",
        request.method,
        request.url.path,
        response.status_code,
        duration,
    )


EVENT_HOOKS = {"request": [mark_request_start], "response": [log_response]}
