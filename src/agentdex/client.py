"""Typed SDK client for the agentdex directory API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, TypeVar

from pydantic import ValidationError

from agentdex.errors import (
    DirectoryDisabledError,
    DirectoryRequestError,
    DirectoryUnreachableError,
)
from agentdex.nostr.events import SignedRecord
from agentdex.payments import (
    DEFAULT_PAYMENT_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    PollOutcome,
    await_payment,
)
from agentdex.schemas import (
    AWAITING_PAYMENT,
    AgentSummary,
    NameCheckResult,
    PaymentRequired,
    PaymentStatus,
    PendingPayment,
    SearchFilter,
    Submitted,
    SubmitResult,
    VerifyResult,
)

DEFAULT_BASE_URL = "https://agentdex.id"
HTTP_PAYMENT_REQUIRED = 402
HTTP_SERVICE_UNAVAILABLE = 503

logger = logging.getLogger("agentdex.http")

T = TypeVar("T")


def _parse(parse: Callable[[dict], T], body: object, action: str) -> T:
    try:
        return parse(body if isinstance(body, dict) else {})
    except ValidationError as exc:
        raise DirectoryRequestError(f"unexpected {action} response", body=body) from exc


def _error_message(body: object, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


@dataclass
class AgentdexClient:
    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    timeout: float = 10.0
    retries: int = 2

    def __post_init__(self) -> None:
        try:
            import requests
            from requests.adapters import HTTPAdapter
            from urllib3.util.retry import Retry
        except Exception as exc:  # pragma: no cover
            raise DirectoryUnreachableError(f"requests stack unavailable: {exc}") from exc

        self._session = requests.Session()
        # 402 and 503 carry meaning for the caller and are never retried.
        retry = Retry(
            total=max(0, int(self.retries)),
            connect=max(0, int(self.retries)),
            read=max(0, int(self.retries)),
            status=max(0, int(self.retries)),
            status_forcelist=(429, 500, 502, 504),
            backoff_factor=0.2,
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        self.base_url = (self.base_url or DEFAULT_BASE_URL).rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json_payload: dict | None = None,
    ):
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        logger.debug("%s %s params=%s", method, path, params)
        try:
            return self._session.request(
                method,
                self._url(path),
                params=params,
                json=json_payload,
                headers=headers,
                timeout=self.timeout,
            )
        except Exception as exc:
            raise DirectoryUnreachableError(str(exc)) from exc

    @staticmethod
    def _decode(response) -> object:
        try:
            return response.json()
        except Exception as exc:
            raise DirectoryRequestError(
                f"invalid JSON response ({response.status_code})",
                status_code=response.status_code,
            ) from exc

    def _raise_for_status(self, response, action: str) -> None:
        if response.status_code < 400:
            return
        try:
            body: object | None = response.json()
        except Exception:
            body = None
        message = _error_message(body, f"{action} failed ({response.status_code})")
        if response.status_code == HTTP_SERVICE_UNAVAILABLE:
            raise DirectoryDisabledError(message, status_code=response.status_code, body=body)
        raise DirectoryRequestError(message, status_code=response.status_code, body=body)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json_payload: dict | None = None,
        action: str = "request",
    ) -> object:
        response = self._send(method, path, params=params, json_payload=json_payload)
        self._raise_for_status(response, action)
        return self._decode(response)

    def _submit(self, path: str, payload: dict, *, action: str) -> SubmitResult:
        response = self._send("POST", path, json_payload=payload)
        if response.status_code != HTTP_PAYMENT_REQUIRED:
            self._raise_for_status(response, action)
        body = self._decode(response)
        if not isinstance(body, dict):
            raise DirectoryRequestError(
                f"{action} failed: unexpected response",
                status_code=response.status_code,
                body=body,
            )
        awaiting = response.status_code == HTTP_PAYMENT_REQUIRED or (
            body.get("status") == AWAITING_PAYMENT and body.get("invoice")
        )
        if not awaiting:
            return Submitted(data=body)
        try:
            payment = PendingPayment.model_validate(body)
        except ValueError as exc:
            raise DirectoryRequestError(
                f"{action} failed: payment required but no invoice returned",
                status_code=response.status_code,
                body=body,
            ) from exc
        return PaymentRequired(payment=payment, data=body)

    def register(self, event: SignedRecord) -> SubmitResult:
        return self._submit(
            "/api/v1/agents/register",
            {"event": event.to_dict()},
            action="registration",
        )

    def register_status(self, payment_hash: str) -> PaymentStatus:
        body = self._request(
            "GET",
            "/api/v1/agents/register/status",
            params={"hash": payment_hash},
            action="registration status",
        )
        return _parse(PaymentStatus.from_response, body, "registration status")

    def claim(self, name: str, event: SignedRecord) -> SubmitResult:
        return self._submit(
            "/api/v1/names/claim",
            {"name": name, "event": event.to_dict()},
            action="claim",
        )

    def claim_status(self, payment_hash: str) -> PaymentStatus:
        body = self._request(
            "GET",
            "/api/v1/names/claim/status",
            params={"hash": payment_hash},
            action="claim status",
        )
        return _parse(PaymentStatus.from_response, body, "claim status")

    def verify(self, public_id: str) -> VerifyResult:
        param = "npub" if public_id.startswith("npub") else "pubkey"
        body = self._request(
            "GET",
            "/api/v1/agents/verify",
            params={param: public_id},
            action="verify",
        )
        return _parse(VerifyResult.model_validate, body, "verify")

    def search(self, search_filter: SearchFilter | None = None) -> list[AgentSummary]:
        params = (search_filter or SearchFilter()).to_params()
        body = self._request("GET", "/api/v1/agents", params=params, action="search")
        if isinstance(body, dict):
            body = body.get("agents", [])
        if not isinstance(body, list):
            raise DirectoryRequestError("search failed: unexpected response", body=body)
        return [_parse(AgentSummary.model_validate, item, "search") for item in body if isinstance(item, dict)]

    def check_name(self, name: str) -> NameCheckResult:
        body = self._request(
            "GET",
            "/api/v1/names/check",
            params={"name": name},
            action="name check",
        )
        return _parse(NameCheckResult.model_validate, body, "name check")

    def wait_for_payment(
        self,
        kind: Literal["register", "claim"],
        payment_hash: str,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_PAYMENT_TIMEOUT,
    ) -> PollOutcome:
        status_check = self.register_status if kind == "register" else self.claim_status
        return await_payment(
            status_check,
            payment_hash,
            poll_interval=poll_interval,
            timeout=timeout,
        )


__all__ = ["AgentdexClient", "DEFAULT_BASE_URL"]
