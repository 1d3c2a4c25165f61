"""
Accounting Models for Estate Office

Journal entries come in two shapes that coexist in storage:

FLAT:   one debit account, one credit account, an amount on each side.
        This is what manual entries and the financial statements use.
NESTED: a list of lines with account code, type, debit and credit.
        The tax summary reads revenue from these lines.

A single entry may carry both.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from estate_office.models.base import CamelModel, IsoDate, StoredRecord, new_record_id


# ============================================================================
# ENUMS
# ============================================================================

class AccountType(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalBalance(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class JournalEntryStatus(str, Enum):
    DRAFT = "draft"
    POSTED = "posted"
    REVERSED = "reversed"


class JournalSourceType(str, Enum):
    MANUAL = "manual"
    PROPERTY_SALE = "property-sale"
    COMMISSION = "commission"
    EXPENSE = "expense"
    PAYMENT = "payment"
    EQUITY = "equity"
    OTHER = "other"


class ExpenseStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class AccountPaymentType(str, Enum):
    RECEIVABLE = "receivable"
    PAYABLE = "payable"


class AccountPaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EquityTransactionType(str, Enum):
    OWNER_CONTRIBUTION = "owner-contribution"
    OWNER_WITHDRAWAL = "owner-withdrawal"
    DIVIDEND = "dividend"
    NET_INCOME = "net-income"
    NET_LOSS = "net-loss"


EQUITY_INCREASING_TYPES = frozenset({
    EquityTransactionType.OWNER_CONTRIBUTION,
    EquityTransactionType.NET_INCOME,
})


# ============================================================================
# JOURNAL
# ============================================================================

class JournalLine(CamelModel):
    """One line of a nested journal entry."""

    account_code: str = Field(default="")
    account_name: str = Field(..., min_length=1)
    account_type: AccountType
    debit: float = Field(default=0.0, ge=0)
    credit: float = Field(default=0.0, ge=0)
    property_id: Optional[str] = None


class JournalEntry(StoredRecord):
    """A double-entry journal record."""

    date: IsoDate
    description: str = Field(default="")

    # Flat format
    debit_account: Optional[str] = None
    debit_amount: Optional[float] = Field(default=None, ge=0)
    credit_account: Optional[str] = None
    credit_amount: Optional[float] = Field(default=None, ge=0)
    amount: Optional[float] = Field(default=None, ge=0)
    reference: Optional[str] = None

    # Nested format
    entries: list[JournalLine] = Field(default_factory=list)

    reference_number: Optional[str] = None
    notes: Optional[str] = None

    status: JournalEntryStatus = Field(default=JournalEntryStatus.POSTED)
    reversal_of_entry_id: Optional[str] = None
    reversed_by_entry_id: Optional[str] = None

    source_type: Optional[JournalSourceType] = None
    source_id: Optional[str] = None

    created_by: str = Field(..., min_length=1)
    created_by_name: Optional[str] = None

    @model_validator(mode='after')
    def fill_flat_amounts(self) -> 'JournalEntry':
        # A bare amount stands for both sides of a flat entry
        if self.amount is not None:
            if self.debit_account and self.debit_amount is None:
                self.debit_amount = self.amount
            if self.credit_account and self.credit_amount is None:
                self.credit_amount = self.amount
        if self.debit_amount and not self.debit_account:
            raise ValueError("Debit account is required when a debit amount is set")
        if self.credit_amount and not self.credit_account:
            raise ValueError("Credit account is required when a credit amount is set")
        return self

    @property
    def is_posted(self) -> bool:
        return self.status == JournalEntryStatus.POSTED

    @property
    def has_flat_lines(self) -> bool:
        return bool(self.debit_account or self.credit_account)

    @property
    def flat_debit(self) -> float:
        return self.debit_amount or 0.0

    @property
    def flat_credit(self) -> float:
        return self.credit_amount or 0.0


class LedgerEntry(StoredRecord):
    """A manual general-ledger posting against a ledger account name."""

    # Older ledger rows were written without ids
    id: str = Field(default_factory=lambda: new_record_id("GL"), min_length=1)
    date: IsoDate
    account_name: str = Field(..., min_length=1)
    debit: float = Field(default=0.0, ge=0)
    credit: float = Field(default=0.0, ge=0)
    description: Optional[str] = None


# ============================================================================
# EXPENSES, PAYMENTS, EQUITY
# ============================================================================

class Expense(StoredRecord):
    """Money the agency spends, or owes while pending."""

    date: IsoDate
    category: str = Field(..., min_length=1)
    description: str = Field(default="")
    amount: float = Field(..., ge=0)
    payment_method: Optional[str] = None
    vendor: Optional[str] = None
    due_date: Optional[IsoDate] = None
    status: ExpenseStatus = Field(default=ExpenseStatus.PAID)
    deductible: bool = Field(default=True)
    agent_id: str = Field(..., min_length=1)
    property_id: Optional[str] = None


class AccountPayment(StoredRecord):
    """A receivable or payable tracked outside the journal."""

    date: IsoDate
    due_date: Optional[IsoDate] = None
    payment_type: AccountPaymentType = Field(alias="type")
    category: str = Field(default="general")
    description: str = Field(default="")
    amount: float = Field(..., ge=0)
    payee: Optional[str] = None
    status: AccountPaymentStatus = Field(default=AccountPaymentStatus.PENDING)
    agent_id: str = Field(..., min_length=1)


class EquityTransaction(StoredRecord):
    """A movement in owner's equity."""

    date: IsoDate
    transaction_type: EquityTransactionType = Field(alias="type")
    amount: float = Field(..., ge=0)
    description: str = Field(default="")
    created_by: str = Field(..., min_length=1)

    @property
    def signed_amount(self) -> float:
        if self.transaction_type in EQUITY_INCREASING_TYPES:
            return self.amount
        return -self.amount
