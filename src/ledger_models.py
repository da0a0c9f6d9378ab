from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, value: str) -> "TransactionType":
        """Map a raw type string to a member, UNKNOWN if it is not recognized."""
        try:
            member = cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN
        return member


class SkipReason(Enum):
    ACCOUNT_NOT_FOUND = "account_not_found"
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    CLIENT_MISMATCH = "client_mismatch"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    UNKNOWN_TYPE = "unknown_type"


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of applying one transaction: applied, or skipped with a reason."""

    skip_reason: Optional[SkipReason] = None

    @property
    def applied(self) -> bool:
        return self.skip_reason is None

    @classmethod
    def success(cls) -> "ProcessingResult":
        return cls()

    @classmethod
    def skipped(cls, reason: SkipReason) -> "ProcessingResult":
        return cls(skip_reason=reason)


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    type_name: Optional[str] = None

    def __repr__(self) -> str:
        type_name = self.type_name if self.transaction_type == TransactionType.UNKNOWN else self.transaction_type.value
        return f"Transaction({type_name}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def charge_back(self, amount: Decimal) -> None:
        self.held -= amount
        self.locked = True


@dataclass
class StoredTransaction:
    """A deposit or withdrawal kept around so later disputes can reference it."""

    client_id: int
    amount: Decimal
    disputed: bool = False


@dataclass
class ProcessingStats:
    """Counters for the end-of-run processing report."""

    processed: int = 0
    skipped: int = 0
    parse_failures: int = 0
    skip_reasons: Counter = field(default_factory=Counter)

    def record(self, result: ProcessingResult) -> None:
        if result.applied:
            self.processed += 1
        else:
            self.skipped += 1
            self.skip_reasons[result.skip_reason] += 1

    def record_parse_failure(self) -> None:
        self.parse_failures += 1
