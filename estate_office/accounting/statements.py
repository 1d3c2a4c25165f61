"""
Financial Statements

DESIGN DECISION: Statements are DERIVED, never stored.
Every statement is recomputed from posted journal entries (plus the
manual general ledger for balances) each time it is asked for.
Nothing here writes to the journal.

WHAT EACH STATEMENT READS:
- Trial balance: posted flat entries up to a date
- Profit & loss: posted flat entries inside a period
- Balance sheet: account balances up to a date. Revenue and expense
  postings reach equity only through closing entries to Retained
  Earnings or Current Year Earnings, or through general-ledger
  revenue and expense accounts
- Cash flow: the P&L, working-capital balances, properties and
  equity transactions
- Changes in equity: equity transactions

Only entries with status posted count. Drafts and reversed entries
are ignored; a reversal is itself a posted entry, so it cancels the
original in every balance.
"""

from datetime import date, timedelta
from typing import Any, NamedTuple, Optional

from estate_office.accounting.chart import (
    CHART_OF_ACCOUNTS,
    LEDGER_TO_BS_ACCOUNT,
    LEGACY_UTILITIES_ACCOUNT,
    UNKNOWN_CREDIT_ACCOUNT,
    UNKNOWN_DEBIT_ACCOUNT,
    get_account_info,
    ledger_posting_balance,
)
from estate_office.accounting.common import ReportService, in_period, report_id
from estate_office.audit.logger import AuditLogger
from estate_office.config import get_settings
from estate_office.models.accounting import (
    AccountType,
    EquityTransaction,
    EquityTransactionType,
    JournalEntry,
    NormalBalance,
)
from estate_office.models.base import UserContext
from estate_office.models.property import PropertyStatus
from estate_office.models.reports import (
    AccountBalance,
    AssetSection,
    BalanceSheet,
    CashFlowStatement,
    ChangesInEquity,
    CurrentAssets,
    CurrentLiabilities,
    EquitySection,
    ExpenseSection,
    FinancingActivities,
    InvestingActivities,
    LiabilitySection,
    LongTermLiabilities,
    NonCurrentAssets,
    OperatingActivities,
    OperatingAdjustments,
    ProfitAndLoss,
    ReportPeriod,
    RevenueSection,
    TrialBalance,
)
from estate_office.repositories import (
    EquityTransactionRepository,
    ExpenseRepository,
    JournalEntryRepository,
    LedgerRepository,
    PropertyRepository,
)


class AccountTotals(NamedTuple):
    debit: float
    credit: float
    balance: float


class FinancialStatements(ReportService):
    """
    Generates the agency's financial statements.

    Every method takes the requesting user; agents only see the
    journal entries, properties, expenses and equity transactions
    they own.
    """

    def __init__(
        self,
        journal: JournalEntryRepository,
        ledger: LedgerRepository,
        properties: PropertyRepository,
        expenses: ExpenseRepository,
        equity: EquityTransactionRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._journal = journal
        self._ledger = ledger
        self._properties = properties
        self._expenses = expenses
        self._equity = equity
        self._settings = get_settings().accounting

    # ========================================================================
    # JOURNAL ACCESS
    # ========================================================================

    def _posted_until(self, as_of: date, user: UserContext) -> list[JournalEntry]:
        return [e for e in self._journal.posted_for(user) if e.date <= as_of]

    def _posted_between(self, start: date, end: date, user: UserContext) -> list[JournalEntry]:
        return [e for e in self._journal.posted_for(user) if start <= e.date <= end]

    def _ledger_balances(self, as_of: date) -> dict[str, float]:
        """General-ledger postings up to a date, summed per balance-sheet account."""
        balances: dict[str, float] = {}
        for entry in self._ledger.list_all():
            if entry.date > as_of:
                continue
            bs_account = LEDGER_TO_BS_ACCOUNT.get(entry.account_name)
            if bs_account is None:
                continue
            balances[bs_account] = balances.get(bs_account, 0.0) + ledger_posting_balance(
                entry.account_name, entry.debit, entry.credit
            )
        return balances

    # ========================================================================
    # TRIAL BALANCE
    # ========================================================================

    def generate_trial_balance(self, as_of: date, user: UserContext) -> TrialBalance:
        """
        Trial balance of every account with activity up to a date.

        Debits and credits are accumulated per account, not netted,
        so the report shows both columns. The difference is debits
        minus credits and should be zero.
        """
        balances: dict[str, AccountBalance] = {
            name: AccountBalance(
                account_code=info.code,
                account_name=name,
                account_type=info.account_type,
                normal_balance=info.normal_balance,
            )
            for name, info in CHART_OF_ACCOUNTS.items()
        }

        def account(name: str, fallback) -> AccountBalance:
            if name not in balances:
                balances[name] = AccountBalance(
                    account_code=fallback.code,
                    account_name=name,
                    account_type=fallback.account_type,
                    normal_balance=fallback.normal_balance,
                )
            return balances[name]

        for entry in self._posted_until(as_of, user):
            if entry.debit_account:
                account(entry.debit_account, UNKNOWN_DEBIT_ACCOUNT).debit_balance += entry.flat_debit
            if entry.credit_account:
                account(entry.credit_account, UNKNOWN_CREDIT_ACCOUNT).credit_balance += entry.flat_credit

        total_debits = sum(a.debit_balance for a in balances.values())
        total_credits = sum(a.credit_balance for a in balances.values())
        difference = total_debits - total_credits

        accounts = sorted(
            (a for a in balances.values() if a.debit_balance > 0 or a.credit_balance > 0),
            key=lambda a: a.account_code,
        )

        report = TrialBalance(
            id=report_id("TB"),
            as_of_date=as_of,
            accounts=accounts,
            total_debits=total_debits,
            total_credits=total_credits,
            difference=difference,
            is_balanced=abs(difference) < self._settings.balance_tolerance,
            generated_by=user.user_id,
        )
        self._generated("trial_balance", report.id, user)
        return report

    # ========================================================================
    # ACCOUNT BALANCES
    # ========================================================================

    def get_account_balance(self, account_name: str, as_of: date, user: UserContext) -> AccountTotals:
        """
        Balance of one account as of a date.

        The balance follows the account's normal side. Manual general
        ledger postings mapped onto the account are added on top.
        """
        debit = 0.0
        credit = 0.0
        for entry in self._posted_until(as_of, user):
            if entry.debit_account == account_name:
                debit += entry.flat_debit
            if entry.credit_account == account_name:
                credit += entry.flat_credit

        if get_account_info(account_name).normal_balance == NormalBalance.DEBIT:
            balance = debit - credit
        else:
            balance = credit - debit
        balance += self._ledger_balances(as_of).get(account_name, 0.0)
        return AccountTotals(debit=debit, credit=credit, balance=balance)

    def _balance(self, account_name: str, as_of: date, user: UserContext) -> float:
        return self.get_account_balance(account_name, as_of, user).balance

    # ========================================================================
    # PROFIT & LOSS
    # ========================================================================

    def generate_profit_and_loss(self, start: date, end: date, user: UserContext) -> ProfitAndLoss:
        """Income statement for a period. Net income equals operating income."""
        revenue = RevenueSection()
        expenses = ExpenseSection()

        revenue_fields = {
            "Commission Revenue": "commission_revenue",
            "Rental Income": "rental_income",
            "Consulting Fees": "consulting_fees",
            "Other Income": "other_income",
        }
        expense_fields = {
            "Salaries & Wages": "salaries_wages",
            "Marketing & Advertising": "marketing_advertising",
            "Office Expenses": "office_expenses",
            "Utilities": "utilities",
            LEGACY_UTILITIES_ACCOUNT: "utilities",
            "Depreciation": "depreciation",
        }

        for entry in self._posted_between(start, end, user):
            field = revenue_fields.get(entry.credit_account or "")
            if field:
                setattr(revenue, field, getattr(revenue, field) + entry.flat_credit)

            debit_account = entry.debit_account or ""
            field = expense_fields.get(debit_account)
            if field:
                setattr(expenses, field, getattr(expenses, field) + entry.flat_debit)
            elif (
                debit_account in CHART_OF_ACCOUNTS
                and CHART_OF_ACCOUNTS[debit_account].account_type == AccountType.EXPENSE
            ):
                expenses.other_expenses += entry.flat_debit

        revenue.total_revenue = (
            revenue.commission_revenue
            + revenue.rental_income
            + revenue.consulting_fees
            + revenue.other_income
        )
        expenses.total_expenses = (
            expenses.salaries_wages
            + expenses.marketing_advertising
            + expenses.office_expenses
            + expenses.utilities
            + expenses.depreciation
            + expenses.other_expenses
        )

        # A service business has no cost of sales
        gross_profit = revenue.total_revenue
        operating_income = gross_profit - expenses.total_expenses

        report = ProfitAndLoss(
            id=report_id("PL"),
            period=ReportPeriod(start_date=start, end_date=end),
            revenue=revenue,
            expenses=expenses,
            gross_profit=gross_profit,
            operating_income=operating_income,
            net_income=operating_income,
            generated_by=user.user_id,
        )
        self._generated("profit_and_loss", report.id, user)
        return report

    # ========================================================================
    # BALANCE SHEET
    # ========================================================================

    def generate_balance_sheet(self, as_of: date, user: UserContext) -> BalanceSheet:
        """
        Balance sheet as of a date.

        Revenue and expense postings are closed into equity: those
        dated in the as-of year go to current-year earnings, earlier
        ones to retained earnings.
        """
        current = CurrentAssets(
            cash_and_bank=self._balance("Cash & Bank", as_of, user),
            accounts_receivable=self._balance("Accounts Receivable", as_of, user),
            prepaid_expenses=self._balance("Prepaid Expenses", as_of, user),
        )
        current.total_current_assets = (
            current.cash_and_bank + current.accounts_receivable + current.prepaid_expenses
        )
        non_current = NonCurrentAssets(
            property_inventory=self._balance("Property Inventory", as_of, user),
            fixed_assets=0.0,
        )
        non_current.total_non_current_assets = non_current.property_inventory + non_current.fixed_assets
        assets = AssetSection(
            current_assets=current,
            non_current_assets=non_current,
            total_assets=current.total_current_assets + non_current.total_non_current_assets,
        )

        current_liabilities = CurrentLiabilities(
            accounts_payable=self._balance("Accounts Payable", as_of, user),
            accrued_expenses=self._balance("Accrued Expenses", as_of, user),
            customer_deposits=self._balance("Customer Deposits", as_of, user),
        )
        current_liabilities.total_current_liabilities = (
            current_liabilities.accounts_payable
            + current_liabilities.accrued_expenses
            + current_liabilities.customer_deposits
        )
        long_term = LongTermLiabilities(loans_payable=0.0, total_long_term_liabilities=0.0)
        liabilities = LiabilitySection(
            current_liabilities=current_liabilities,
            long_term_liabilities=long_term,
            total_liabilities=(
                current_liabilities.total_current_liabilities
                + long_term.total_long_term_liabilities
            ),
        )

        equity = EquitySection(
            owners_capital=self._balance("Owner's Capital", as_of, user),
            retained_earnings=self._balance("Retained Earnings", as_of, user),
            current_year_earnings=self._balance("Current Year Earnings", as_of, user),
        )
        equity.total_equity = (
            equity.owners_capital + equity.retained_earnings + equity.current_year_earnings
        )

        total_le = liabilities.total_liabilities + equity.total_equity
        report = BalanceSheet(
            id=report_id("BS"),
            as_of_date=as_of,
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            total_liabilities_and_equity=total_le,
            is_balanced=abs(assets.total_assets - total_le) < self._settings.balance_tolerance,
            generated_by=user.user_id,
        )
        self._generated("balance_sheet", report.id, user)
        return report

    # ========================================================================
    # CASH FLOW
    # ========================================================================

    def generate_cash_flow_statement(self, start: date, end: date, user: UserContext) -> CashFlowStatement:
        """
        Indirect-method cash flow statement for a period.

        Working-capital changes compare balances at the day before
        the period with balances at its end. A rise in receivables
        uses cash; a rise in payables frees it. Beginning cash is the
        Cash & Bank balance as of the start date, so postings dated on
        the first day of the period are already in it.
        """
        pl = self.generate_profit_and_loss(start, end, user)
        day_before = start - timedelta(days=1)

        receivable_change = -(
            self._balance("Accounts Receivable", end, user)
            - self._balance("Accounts Receivable", day_before, user)
        )
        payable_change = (
            self._balance("Accounts Payable", end, user)
            - self._balance("Accounts Payable", day_before, user)
        )
        adjustments = OperatingAdjustments(
            depreciation=pl.expenses.depreciation,
            accounts_receivable_change=receivable_change,
            accounts_payable_change=payable_change,
            total_adjustments=pl.expenses.depreciation + receivable_change + payable_change,
        )
        operating = OperatingActivities(
            net_income=pl.net_income,
            adjustments=adjustments,
            net_cash_from_operating=pl.net_income + adjustments.total_adjustments,
        )

        properties = self._properties.list_for(user)
        purchases = sum(p.price for p in properties if in_period(p.created_at, start, end))
        disposals = sum(p.price for p in properties if in_period(p.sold_date, start, end))
        investing = InvestingActivities(
            property_purchases=purchases,
            property_disposals=disposals,
            net_cash_from_investing=disposals - purchases,
        )

        period_equity = [t for t in self._equity.list_for(user) if start <= t.date <= end]
        contributions = sum(
            t.amount for t in period_equity
            if t.transaction_type == EquityTransactionType.OWNER_CONTRIBUTION
        )
        withdrawals = sum(
            t.amount for t in period_equity
            if t.transaction_type == EquityTransactionType.OWNER_WITHDRAWAL
        )
        financing = FinancingActivities(
            owner_contributions=contributions,
            owner_withdrawals=withdrawals,
            net_cash_from_financing=contributions - withdrawals,
        )

        report = CashFlowStatement(
            id=report_id("CF"),
            period=ReportPeriod(start_date=start, end_date=end),
            operating_activities=operating,
            investing_activities=investing,
            financing_activities=financing,
            net_cash_change=(
                operating.net_cash_from_operating
                + investing.net_cash_from_investing
                + financing.net_cash_from_financing
            ),
            beginning_cash=self._balance("Cash & Bank", start, user),
            ending_cash=self._balance("Cash & Bank", end, user),
            generated_by=user.user_id,
        )
        self._generated("cash_flow", report.id, user)
        return report

    # ========================================================================
    # EQUITY
    # ========================================================================

    def add_equity_transaction(self, **fields: Any) -> EquityTransaction:
        """Record an owner contribution, withdrawal, dividend or closing entry."""
        return self._equity.create(**fields)

    def delete_equity_transaction(self, transaction_id: str) -> bool:
        return self._equity.delete(transaction_id)

    def generate_changes_in_equity(
        self,
        start: date,
        end: date,
        user: UserContext,
        net_income: float,
    ) -> ChangesInEquity:
        """
        Statement of changes in equity for a period.

        The opening balance is the signed total of every transaction
        dated before the period. Net income comes from the caller,
        normally the P&L for the same period.
        """
        transactions = self._equity.list_for(user)
        beginning = sum(t.signed_amount for t in transactions if t.date < start)

        in_range = sorted(
            (t for t in transactions if start <= t.date <= end),
            key=lambda t: t.date,
        )
        totals = {kind: 0.0 for kind in EquityTransactionType}
        for transaction in in_range:
            totals[transaction.transaction_type] += transaction.amount

        contributions = totals[EquityTransactionType.OWNER_CONTRIBUTION]
        withdrawals = totals[EquityTransactionType.OWNER_WITHDRAWAL]
        dividends = totals[EquityTransactionType.DIVIDEND]

        report = ChangesInEquity(
            id=report_id("CE"),
            period=ReportPeriod(start_date=start, end_date=end),
            beginning_balance=beginning,
            net_income=net_income,
            contributions=contributions,
            withdrawals=withdrawals,
            dividends=dividends,
            ending_balance=beginning + net_income + contributions - withdrawals - dividends,
            transactions=in_range,
            generated_by=user.user_id,
        )
        self._generated("changes_in_equity", report.id, user)
        return report

    def net_income_for_period(self, start: date, end: date, user: UserContext) -> float:
        """Commission earned on properties sold in the period, less the period's expenses."""
        commission = sum(
            p.commission_earned
            for p in self._properties.list_for(user)
            if p.status == PropertyStatus.SOLD and in_period(p.sold_date, start, end)
        )
        spent = sum(e.amount for e in self._expenses.list_for(user) if start <= e.date <= end)
        return commission - spent
