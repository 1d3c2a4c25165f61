"""
Accounting repositories: journal, general ledger, expenses, account
payments and equity transactions.
"""

from datetime import date
from typing import Optional

import structlog

from estate_office.models.accounting import (
    AccountPayment,
    EquityTransaction,
    Expense,
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    LedgerEntry,
)
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.base import UserContext
from estate_office.repositories.base import RecordRepository

logger = structlog.get_logger(__name__)


class JournalEntryRepository(RecordRepository[JournalEntry]):
    """Journal entries under journal_entries, visible to their creator."""

    key = "journal_entries"
    model = JournalEntry
    id_prefix = "JE"
    entity_type = "journal_entry"

    def is_visible(self, record: JournalEntry, user: UserContext) -> bool:
        return record.created_by == user.user_id

    def posted_for(self, user: UserContext) -> list[JournalEntry]:
        return [e for e in self.list_for(user) if e.is_posted]

    def add(self, record: JournalEntry) -> JournalEntry:
        record = super().add(record)
        if self._audit and record.is_posted:
            self._audit.log(AuditEventBuilder.journal_entry_posted(
                entry_id=record.id,
                amount=max(record.flat_debit, record.flat_credit),
                user_id=record.created_by,
            ))
        return record

    def reverse(
        self,
        entry_id: str,
        user_id: str,
        user_name: Optional[str] = None,
        reversal_date: Optional[date] = None,
    ) -> JournalEntry:
        """
        Post an entry that cancels another one.

        The reversal swaps debit and credit on both the flat fields and
        the nested lines. The original stays posted and is linked to
        its reversal.

        Raises:
            NotFoundError: If the entry does not exist
            ValueError: If the entry is not posted or was already reversed
        """
        original = self.require(entry_id)
        if original.reversed_by_entry_id:
            raise ValueError(
                f"Journal entry {entry_id} has already been reversed "
                f"by {original.reversed_by_entry_id}"
            )
        if not original.is_posted:
            raise ValueError(f"Only posted entries can be reversed ({entry_id} is {original.status.value})")

        reversal = JournalEntry(
            id=self.new_id(),
            date=reversal_date or date.today(),
            description=f"REVERSAL: {original.description}",
            debit_account=original.credit_account,
            debit_amount=original.credit_amount,
            credit_account=original.debit_account,
            credit_amount=original.debit_amount,
            amount=original.amount,
            reference=f"Reverses {original.id}",
            entries=[
                JournalLine(
                    account_code=line.account_code,
                    account_name=line.account_name,
                    account_type=line.account_type,
                    debit=line.credit,
                    credit=line.debit,
                    property_id=line.property_id,
                )
                for line in original.entries
            ],
            status=JournalEntryStatus.POSTED,
            reversal_of_entry_id=original.id,
            source_type=original.source_type,
            source_id=original.source_id,
            created_by=user_id,
            created_by_name=user_name,
        )
        super().add(reversal)
        self.update(entry_id, reversed_by_entry_id=reversal.id)

        logger.info("journal_entry_reversed", entry_id=entry_id, reversal_id=reversal.id)
        if self._audit:
            self._audit.log(AuditEventBuilder.journal_entry_reversed(
                entry_id=entry_id,
                reversal_id=reversal.id,
                user_id=user_id,
            ))
        return reversal


class LedgerRepository(RecordRepository[LedgerEntry]):
    """Manual general-ledger postings under general_ledger_entries."""

    key = "general_ledger_entries"
    model = LedgerEntry
    id_prefix = "GL"
    entity_type = "ledger_entry"

    def is_visible(self, record: LedgerEntry, user: UserContext) -> bool:
        return True


class ExpenseRepository(RecordRepository[Expense]):
    """Expenses under estate_expenses, visible to their agent."""

    key = "estate_expenses"
    model = Expense
    id_prefix = "EXP"
    entity_type = "expense"


class AccountPaymentRepository(RecordRepository[AccountPayment]):
    """Receivables and payables under account_payments."""

    key = "account_payments"
    model = AccountPayment
    id_prefix = "PAY"
    entity_type = "account_payment"


class EquityTransactionRepository(RecordRepository[EquityTransaction]):
    """Equity movements under equity_transactions, visible to their creator."""

    key = "equity_transactions"
    model = EquityTransaction
    id_prefix = "EQ"
    entity_type = "equity_transaction"

    def is_visible(self, record: EquityTransaction, user: UserContext) -> bool:
        return record.created_by == user.user_id
