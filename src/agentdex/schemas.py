"""Directory backend response schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, List, Optional, Union

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

PAID_STATES = frozenset({"paid", "completed"})
AWAITING_PAYMENT = "awaiting_payment"

# Backends send null for empty lists.
StringList = Annotated[List[str], BeforeValidator(lambda value: [] if value is None else value)]


class _Response(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PendingPayment(_Response):
    invoice: str
    payment_hash: str = Field(validation_alias=AliasChoices("payment_hash", "paymentHash"))
    amount_sats: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("amount_sats", "amountSats", "amount"),
    )
    expires_at: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("expires_at", "expiresAt"),
    )


class PaymentStatus(_Response):
    status: Optional[str] = None
    paid: bool = False
    name: Optional[str] = None
    nip05: Optional[str] = None

    @classmethod
    def from_response(cls, payload: dict) -> "PaymentStatus":
        raw_status = payload.get("status")
        status = raw_status.strip().lower() if isinstance(raw_status, str) else None
        paid = payload.get("paid") is True or status in PAID_STATES
        return cls.model_validate({**payload, "status": status, "paid": paid})


class VerifyResult(_Response):
    registered: bool = False
    has_nostr: bool = Field(default=False, alias="hasNostr")
    has_agentdex: bool = Field(default=False, alias="hasAgentdex")
    trust_score: Optional[Union[int, float]] = Field(default=None, alias="trustScore")
    name: Optional[str] = None
    npub: Optional[str] = None
    capabilities: StringList = Field(default_factory=list)
    messaging_policy: Optional[str] = Field(default=None, alias="messagingPolicy")


class AgentSummary(_Response):
    name: Optional[str] = None
    npub: Optional[str] = None
    description: Optional[str] = None
    capabilities: StringList = Field(default_factory=list)
    framework: Optional[str] = None
    status: Optional[str] = None
    trust_score: Optional[Union[int, float]] = Field(default=None, alias="trustScore")


class NameCheckResult(_Response):
    available: bool = False
    suggestions: StringList = Field(default_factory=list)


@dataclass(frozen=True)
class Submitted:
    """Backend accepted the submission without payment."""

    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentRequired:
    """Backend wants an invoice paid before the submission takes effect."""

    payment: PendingPayment
    data: dict = field(default_factory=dict)


SubmitResult = Union[Submitted, PaymentRequired]


@dataclass(frozen=True)
class SearchFilter:
    query: str | None = None
    capability: str | None = None
    framework: str | None = None
    status: str | None = None
    limit: int = 10

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for key, value in (
            ("q", self.query),
            ("capability", self.capability),
            ("framework", self.framework),
            ("status", self.status),
        ):
            if value:
                params[key] = value
        if self.limit:
            params["limit"] = str(int(self.limit))
        return params
