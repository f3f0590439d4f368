"""
BYOK budget policy for paid text-service calls.

A user may bring their own API key with a monthly budget. When the budget
is exhausted and hard stop is enabled the call is refused outright with
BudgetExceededError; otherwise the platform key is used instead.

Usage is tracked in memory per (user, month). Durable storage is the
caller's concern.
"""

import math
from datetime import datetime
from typing import Dict, NamedTuple, Optional, Tuple

from pydantic import BaseModel, Field, SecretStr

from talent_engine.config import settings
from talent_engine.errors import BudgetExceededError

MODEL_COST_MULTIPLIER: Dict[str, float] = {
    "gemini-2.5-flash": 1.0,
    "gemini-2.5-pro": 4.0,
    "gemini-2.5-flash-native-audio": 2.5,
}

EST_INPUT_USD_PER_1M = 0.4
EST_OUTPUT_USD_PER_1M = 1.2
CHARS_PER_TOKEN = 4


class ByokAccount(BaseModel):
    """A user's BYOK settings."""

    enabled: bool = False
    api_key: Optional[SecretStr] = None
    monthly_budget_usd: float = Field(ge=0, default_factory=lambda: settings.byok_default_budget_usd)
    hard_stop: bool = False

    @property
    def key_last4(self) -> Optional[str]:
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value()[-4:]


class UsageRecord(BaseModel):
    month: str
    estimated_input_tokens: int = 0
    estimated_output_tokens: int = 0
    estimated_spend_usd: float = 0.0
    byok_spend_usd: float = 0.0
    platform_spend_usd: float = 0.0
    request_count: int = 0
    feature_counts: Dict[str, int] = {}


class ByokStatus(BaseModel):
    enabled: bool
    key_last4: Optional[str] = None
    monthly_budget_usd: float
    hard_stop: bool
    estimated_monthly_spend_usd: float
    budget_exceeded: bool


class KeyResolution(NamedTuple):
    api_key: str
    key_source: str                         # "platform" | "byok"
    status: ByokStatus


def month_key(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"{now.year}_{now.month:02d}"


def round_usd(value: float) -> float:
    return round(value * 1_000_000) / 1_000_000


def estimate_tokens(chars: int) -> int:
    return math.ceil(max(0, chars) / CHARS_PER_TOKEN)


def estimate_cost_usd(model: str, input_tokens: int, output_tokens: int) -> float:
    multiplier = MODEL_COST_MULTIPLIER.get(model, 1.0)
    input_cost = input_tokens / 1_000_000 * EST_INPUT_USD_PER_1M * multiplier
    output_cost = output_tokens / 1_000_000 * EST_OUTPUT_USD_PER_1M * multiplier
    return round_usd(input_cost + output_cost)


class UsageLedger:
    """In-memory monthly usage per user."""

    def __init__(self):
        self._records: Dict[Tuple[str, str], UsageRecord] = {}

    def snapshot(self, uid: str, now: Optional[datetime] = None) -> UsageRecord:
        month = month_key(now)
        record = self._records.get((uid, month))
        if record is None:
            return UsageRecord(month=month)
        return record.model_copy(deep=True)

    def track(
        self,
        uid: str,
        model: str,
        feature: str,
        key_source: str,
        input_chars: int,
        output_chars: int,
        now: Optional[datetime] = None,
    ) -> UsageRecord:
        month = month_key(now)
        record = self._records.setdefault((uid, month), UsageRecord(month=month))

        input_tokens = estimate_tokens(input_chars)
        output_tokens = estimate_tokens(output_chars)
        cost = estimate_cost_usd(model, input_tokens, output_tokens)

        record.estimated_input_tokens += input_tokens
        record.estimated_output_tokens += output_tokens
        record.estimated_spend_usd = round_usd(record.estimated_spend_usd + cost)
        if key_source == "byok":
            record.byok_spend_usd = round_usd(record.byok_spend_usd + cost)
        else:
            record.platform_spend_usd = round_usd(record.platform_spend_usd + cost)
        record.request_count += 1
        record.feature_counts[feature] = record.feature_counts.get(feature, 0) + 1
        return record.model_copy(deep=True)


class BudgetPolicy:
    """Decides which key pays for a call, or refuses it."""

    def __init__(
        self,
        platform_api_key: str,
        ledger: Optional[UsageLedger] = None,
        accounts: Optional[Dict[str, ByokAccount]] = None,
    ):
        self.platform_api_key = platform_api_key
        self.ledger = ledger or UsageLedger()
        self._accounts: Dict[str, ByokAccount] = dict(accounts or {})

    def set_account(self, uid: str, account: ByokAccount) -> None:
        self._accounts[uid] = account

    def clear_account(self, uid: str) -> None:
        self._accounts.pop(uid, None)

    def status(self, uid: str, now: Optional[datetime] = None) -> ByokStatus:
        account = self._accounts.get(uid, ByokAccount())
        spend = self.ledger.snapshot(uid, now).estimated_spend_usd
        return ByokStatus(
            enabled=account.enabled,
            key_last4=account.key_last4,
            monthly_budget_usd=account.monthly_budget_usd,
            hard_stop=account.hard_stop,
            estimated_monthly_spend_usd=spend,
            budget_exceeded=spend >= account.monthly_budget_usd,
        )

    def resolve_key(self, uid: Optional[str], now: Optional[datetime] = None) -> KeyResolution:
        """
        Pick the key for a call.

        Raises BudgetExceededError when a BYOK user is over budget with
        hard stop on. That error must never be turned into a fallback.
        """
        if not uid:
            return KeyResolution(
                self.platform_api_key,
                "platform",
                ByokStatus(
                    enabled=False,
                    monthly_budget_usd=settings.byok_default_budget_usd,
                    hard_stop=False,
                    estimated_monthly_spend_usd=0.0,
                    budget_exceeded=False,
                ),
            )

        status = self.status(uid, now)
        account = self._accounts.get(uid)
        if not status.enabled or account is None:
            return KeyResolution(self.platform_api_key, "platform", status)

        if status.budget_exceeded and status.hard_stop:
            raise BudgetExceededError(
                uid, status.estimated_monthly_spend_usd, status.monthly_budget_usd
            )

        if account.api_key is None or status.budget_exceeded:
            return KeyResolution(self.platform_api_key, "platform", status)

        return KeyResolution(account.api_key.get_secret_value(), "byok", status)
