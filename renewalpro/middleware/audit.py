"""Request audit middleware: records every state-changing API call to audit_trail."""

import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from renewalpro.db.base import async_session_factory
from renewalpro.domain.audit import AuditTrail

logger = logging.getLogger(__name__)

_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
_ID_LENGTH = 36
# Collection names whose singular is not just the name minus "s"
_SINGULAR = {"entities": "entity", "agent-invitations": "agent_invitation"}

# Audit writes still in flight; drained on shutdown
_pending: set[asyncio.Task] = set()


def describe_path(path: str) -> tuple[str, str | None]:
    """Resource type and id for a path such as /api/v1/entities/<uuid>/..."""
    parts = [p for p in path.strip("/").split("/") if p]
    if parts[:2] == ["api", "v1"]:
        parts = parts[2:]
    if parts and parts[0] == "admin":
        parts = parts[1:]
    if not parts:
        return "unknown", None

    collection = parts[0]
    singular = collection[:-1] if collection.endswith("s") else collection
    resource = _SINGULAR.get(collection, singular).replace("-", "_")
    entity_id = next((p for p in parts[1:] if len(p) == _ID_LENGTH), None)
    return resource, entity_id


async def drain_pending() -> None:
    """Wait for background audit writes that have not finished yet."""
    if _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    The row is written in a background task after the response is produced,
    with its own session.  Failures are logged and never reach the caller.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS and request.url.path.startswith("/api/"):
            task = asyncio.create_task(self._record(request, response.status_code, duration_ms))
            _pending.add(task)
            task.add_done_callback(_pending.discard)

        return response

    async def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        resource, entity_id = describe_path(request.url.path)
        try:
            async with async_session_factory() as session:
                session.add(
                    AuditTrail(
                        actor_id=request.headers.get("x-user-id"),
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=resource,
                        entity_id=entity_id,
                        description=(
                            f"{request.method} {request.url.path} -> {status_code} ({duration_ms}ms)"
                        ),
                    )
                )
                await session.commit()
        except Exception:  # pragma: no cover
            logger.exception("Audit write failed for %s %s", request.method, request.url.path)
