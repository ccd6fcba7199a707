"""HTTP client for a ledger gateway fronting the product registry contract."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Coroutine, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PayloadValidationError

from chainmark.adapters.http_resilience import ResilienceConfig, ResilientClient
from chainmark.config.ledger import LedgerConfig, get_ledger_config
from chainmark.domain.errors import LedgerError

from .schema import (
    AppendStageRequest,
    CreateRecordRequest,
    ErrorResponse,
    RecordResponse,
    TransactionResponse,
)

if TYPE_CHECKING:
    from types import TracebackType

    from chainmark.domain.ports.ledger import LedgerClient, LedgerRecord

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class LedgerAPIError(LedgerError):
    """Raised when the gateway answers with an application-level error."""

    def __init__(self, message: str, *, status: int, code: int | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.code = code


@dataclass(slots=True)
class HttpLedgerClient:
    """Synchronous ``LedgerClient`` over the async resilient HTTP client.

    Calls are handed to an event loop running on a background thread owned by this
    client, so the single ``ResilientClient`` built on first use keeps its rate limiter
    and response cache across calls. Each call is cut off after
    ``config.call_timeout_seconds`` and every failure surfaces as ``LedgerError``.
    """

    config: LedgerConfig = field(default_factory=get_ledger_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _loop: asyncio.AbstractEventLoop | None = field(default=None, init=False, repr=False)
    _thread: threading.Thread | None = field(default=None, init=False, repr=False)
    _client: ResilientClient | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def create_record(self, product_id: str, fields: Mapping[str, str]) -> str:
        request = CreateRecordRequest(
            product_id=product_id,
            name=fields.get("name", ""),
            origin=fields.get("origin", ""),
            manufacturer=fields.get("manufacturer", ""),
            certification_hash=fields.get("certificationHash", ""),
        )
        return self._run(
            "create_record",
            self._post_transaction("/products", request.model_dump(by_alias=True)),
        )

    def append_stage(self, product_id: str, stage: str) -> str:
        request = AppendStageRequest(stage=stage)
        return self._run(
            "append_stage",
            self._post_transaction(
                f"/products/{quote(product_id, safe='')}/stages",
                request.model_dump(),
            ),
        )

    def read_record(self, product_id: str) -> LedgerRecord | None:
        return self._run("read_record", self._get_record(product_id))

    def close(self) -> None:
        """Close the shared HTTP client and stop the background loop."""

        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None:
            return
        try:
            client = self._client
            if client is not None:
                asyncio.run_coroutine_threadsafe(client.aclose(), loop).result()
        finally:
            self._client = None
            loop.call_soon_threadsafe(loop.stop)
            if thread is not None:
                thread.join()
            loop.close()

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="chainmark-ledger", daemon=True
                )
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    def _run[T](self, operation: str, call: Coroutine[Any, Any, T]) -> T:
        async def bounded() -> T:
            return await asyncio.wait_for(call, timeout=self.config.call_timeout_seconds)

        scheduled = bounded()
        try:
            loop = self._ensure_loop()
            if threading.current_thread() is self._thread:
                raise RuntimeError("cannot block the ledger event loop on its own call")
            future = asyncio.run_coroutine_threadsafe(scheduled, loop)
        except RuntimeError as exc:
            scheduled.close()
            call.close()
            message = f"Ledger {operation} could not be scheduled: {exc}"
            raise LedgerError(message, cause=exc) from exc

        try:
            return future.result()
        except LedgerError:
            raise
        except TimeoutError as exc:
            raise LedgerError(
                f"Ledger {operation} timed out after {self.config.call_timeout_seconds}s",
                cause=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise LedgerError(f"Ledger {operation} transport error: {exc}", cause=exc) from exc
        except (PayloadValidationError, ValueError) as exc:
            message = f"Ledger {operation} returned a malformed payload"
            raise LedgerError(message, cause=exc) from exc

    async def _session(self) -> ResilientClient:
        # Runs only on the background loop thread.
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    async def _post_transaction(self, path: str, body: dict[str, object]) -> str:
        client = await self._session()
        response = await client.post(self._url(path), json=body)
        self._raise_for_error(response)
        return TransactionResponse.model_validate(response.json()).transaction_hash

    async def _get_record(self, product_id: str) -> LedgerRecord | None:
        client = await self._session()
        response = await client.get(self._url(f"/products/{quote(product_id, safe='')}"))
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_error(response)
        return RecordResponse.model_validate(response.json()).record

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            payload = ErrorResponse.model_validate(response.json())
        except (PayloadValidationError, ValueError):
            message = f"Ledger gateway returned HTTP {response.status_code}"
            log.error(message)
            raise LedgerAPIError(message, status=response.status_code) from None
        log.error(f"Ledger gateway error {payload.error.code}: {payload.error.message}")
        raise LedgerAPIError(
            payload.error.message,
            status=response.status_code,
            code=payload.error.code,
        ) from None


def is_cacheable_record(payload: object) -> bool:
    """Cache predicate for ledger reads: only successful record payloads."""

    return isinstance(payload, dict) and "record" in payload


if TYPE_CHECKING:
    _client_check: LedgerClient = HttpLedgerClient()
