"""
ASGI middleware serving responses with stale-while-revalidate caching.

Clients opt in per request with a header such as
"X-Stalier-Cache-Control: s-maxage=60, stale-while-revalidate=300".
"""
import asyncio
import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..settings import settings
from stalier.cache import (
    CacheStatus,
    CacheStore,
    StalierPolicy,
    WarningLogger,
    with_stale_while_revalidate,
)
from .headers import KeyGenFn, default_key_generator, parse_cache_control

logger = logging.getLogger("stalier.http")

# Recomputed for the replayed body
_FRAMING_HEADERS = {"content-length", "transfer-encoding"}


@dataclass
class CachedResponse:
    """A downstream response captured so it can be stored and replayed."""
    status_code: int
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    @property
    def is_cacheable(self) -> bool:
        return 200 <= self.status_code <= 300

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dictionary for the cache store."""
        return {
            "statusCode": self.status_code,
            "headers": [[name, value] for name, value in self.headers],
            "body": base64.b64encode(self.body).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedResponse":
        return cls(
            status_code=int(data["statusCode"]),
            headers=[(name, value) for name, value in data.get("headers", [])],
            body=base64.b64decode(data.get("body", "")),
        )

    def to_response(self) -> Response:
        response = Response(content=self.body, status_code=self.status_code)
        for name, value in self.headers:
            if name.lower() not in _FRAMING_HEADERS:
                response.headers.append(name, value)
        return response


class UpstreamResponseError(Exception):
    """The downstream app answered with a status that must not be cached."""

    def __init__(self, response: CachedResponse):
        super().__init__(f"Upstream responded with status {response.status_code}")
        self.response = response


class _ResponseCapture:
    """ASGI send callable that records a response instead of sending it."""

    def __init__(self):
        self.status_code: Optional[int] = None
        self.headers: List[Tuple[str, str]] = []
        self._chunks: List[bytes] = []

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            self.headers = [
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in message.get("headers", [])
            ]
        elif message["type"] == "http.response.body":
            self._chunks.append(message.get("body", b""))

    def result(self) -> CachedResponse:
        if self.status_code is None:
            raise RuntimeError("Downstream app finished without starting a response")
        return CachedResponse(
            status_code=self.status_code,
            headers=self.headers,
            body=b"".join(self._chunks),
        )


def _replay_receive(body: bytes) -> Receive:
    """Receive callable handing the already-read request body to a re-run of the app."""
    sent = False
    never_disconnects = asyncio.Event()

    async def receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        await never_disconnects.wait()
        return {"type": "http.disconnect"}

    return receive


class StalierMiddleware:
    """
    Serve cacheable responses through the stale-while-revalidate engine.

    Pure ASGI rather than BaseHTTPMiddleware: a STALE hit re-runs the
    downstream app after the client already has its answer, which needs
    an app call that does not depend on the original request's streams.
    """

    def __init__(
        self,
        app: ASGIApp,
        cache_store: CacheStore,
        app_name: Optional[str] = None,
        cache_key_gen: Optional[KeyGenFn] = None,
        logger: Optional[WarningLogger] = None,
    ):
        """
        Args:
            app: Downstream ASGI application
            cache_store: Store holding cached responses
            app_name: Key prefix (defaults to settings.app_name)
            cache_key_gen: Builds the per-request key, prefixed with app_name.
                Defaults to "<app_name>-<METHOD>-<path>"
            logger: Sink for contained cache failures
        """
        self.app = app
        self.cache_store = cache_store
        self.app_name = app_name or settings.app_name
        self.cache_key_gen = self._prefixed(cache_key_gen)
        self.logger = logger if logger is not None else logging.getLogger("stalier.http")

    def _prefixed(self, key_gen: Optional[KeyGenFn]) -> KeyGenFn:
        if key_gen is None:
            return default_key_generator(self.app_name)
        return lambda request: f"{self.app_name}-{key_gen(request)}"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in settings.cacheable_methods:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        cache_control = request.headers.get(settings.header_key)
        if not cache_control:
            await self.app(scope, receive, send)
            return

        directives = parse_cache_control(cache_control)
        if directives is None:
            await self.app(scope, receive, self._with_status(send, CacheStatus.NO_CACHE))
            return

        body = await request.body()

        async def producer() -> Dict[str, Any]:
            capture = _ResponseCapture()
            await self.app(dict(scope), _replay_receive(body), capture)
            captured = capture.result()
            if not captured.is_cacheable:
                raise UpstreamResponseError(captured)
            return captured.to_dict()

        policy = StalierPolicy(
            cache_store=self.cache_store,
            key=self.cache_key_gen(request),
            max_age=directives.max_age,
            stale_while_revalidate=directives.stale_while_revalidate,
            logger=self.logger,
        )

        try:
            result = await with_stale_while_revalidate(producer, policy)
        except UpstreamResponseError as e:
            response = e.response.to_response()
            status = CacheStatus.NO_CACHE
        except Exception as e:
            logger.warning(f"Unexpected error while processing cache for {request.url.path}: {e}")
            response = JSONResponse(
                {"error": "unexpected error while processing cache"},
                status_code=500,
            )
            status = CacheStatus.NO_CACHE
        else:
            response = CachedResponse.from_dict(result.data).to_response()
            status = result.status

        response.headers[settings.cache_status_header] = status.value
        await response(scope, receive, send)

    @staticmethod
    def _with_status(send: Send, status: CacheStatus) -> Send:
        async def send_with_status(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[settings.cache_status_header] = status.value
            await send(message)

        return send_with_status
