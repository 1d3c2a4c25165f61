"""
Chart of Accounts

DESIGN DECISION: Account names are the join key.
Journal entries reference accounts by name, not by code, so the chart
maps each name to its code, type and normal balance. Names that are
not in the chart still post; they are reported under code 9999.

The general ledger uses its own, older account names. Those are mapped
onto balance-sheet accounts here so the statements can fold manual
ledger postings into the journal balances.
"""

from typing import NamedTuple

from estate_office.models.accounting import AccountType, NormalBalance


class AccountInfo(NamedTuple):
    code: str
    account_type: AccountType
    normal_balance: NormalBalance


UNKNOWN_ACCOUNT_CODE = "9999"


def _debit(code: str, account_type: AccountType) -> AccountInfo:
    return AccountInfo(code, account_type, NormalBalance.DEBIT)


def _credit(code: str, account_type: AccountType) -> AccountInfo:
    return AccountInfo(code, account_type, NormalBalance.CREDIT)


# ============================================================================
# CHART OF ACCOUNTS
# ============================================================================

CHART_OF_ACCOUNTS: dict[str, AccountInfo] = {
    # Assets
    "Cash & Bank": _debit("1000", AccountType.ASSET),
    "Accounts Receivable": _debit("1100", AccountType.ASSET),
    "Property Inventory": _debit("1200", AccountType.ASSET),
    "Prepaid Expenses": _debit("1300", AccountType.ASSET),

    # Liabilities
    "Accounts Payable": _credit("2000", AccountType.LIABILITY),
    "Accrued Expenses": _credit("2100", AccountType.LIABILITY),
    "Customer Deposits": _credit("2200", AccountType.LIABILITY),

    # Equity
    "Owner's Capital": _credit("3000", AccountType.EQUITY),
    "Retained Earnings": _credit("3100", AccountType.EQUITY),
    "Current Year Earnings": _credit("3200", AccountType.EQUITY),

    # Revenue
    "Commission Revenue": _credit("4000", AccountType.REVENUE),
    "Rental Income": _credit("4100", AccountType.REVENUE),
    "Consulting Fees": _credit("4200", AccountType.REVENUE),
    "Other Income": _credit("4900", AccountType.REVENUE),

    # Expenses
    "Salaries & Wages": _debit("5000", AccountType.EXPENSE),
    "Marketing & Advertising": _debit("5100", AccountType.EXPENSE),
    "Office Expenses": _debit("5200", AccountType.EXPENSE),
    "Utilities": _debit("5300", AccountType.EXPENSE),
    "Transportation": _debit("5400", AccountType.EXPENSE),
    "Professional Fees": _debit("5500", AccountType.EXPENSE),
    "Insurance": _debit("5600", AccountType.EXPENSE),
    "Depreciation": _debit("5700", AccountType.EXPENSE),
    "Other Expenses": _debit("5900", AccountType.EXPENSE),
}

REVENUE_ACCOUNTS = [
    name for name, info in CHART_OF_ACCOUNTS.items()
    if info.account_type == AccountType.REVENUE
]
EXPENSE_ACCOUNTS = [
    name for name, info in CHART_OF_ACCOUNTS.items()
    if info.account_type == AccountType.EXPENSE
]

# Older entries were posted against this name
LEGACY_UTILITIES_ACCOUNT = "Utilities & Communication"

UNKNOWN_DEBIT_ACCOUNT = _debit(UNKNOWN_ACCOUNT_CODE, AccountType.EXPENSE)
UNKNOWN_CREDIT_ACCOUNT = _credit(UNKNOWN_ACCOUNT_CODE, AccountType.REVENUE)


def get_account_info(account_name: str) -> AccountInfo:
    """Chart entry for an account; unknown names are treated as expenses."""
    return CHART_OF_ACCOUNTS.get(account_name, UNKNOWN_DEBIT_ACCOUNT)


def is_chart_account(account_name: str) -> bool:
    return account_name in CHART_OF_ACCOUNTS


# ============================================================================
# GENERAL LEDGER MAPPING
# ============================================================================

CURRENT_YEAR_EARNINGS = "Current Year Earnings"

LEDGER_TO_BS_ACCOUNT: dict[str, str] = {
    "Cash": "Cash & Bank",
    "Bank Account": "Cash & Bank",
    "Accounts Receivable": "Accounts Receivable",
    "Commission Receivable": "Accounts Receivable",
    "Property Inventory": "Property Inventory",
    "Accounts Payable": "Accounts Payable",
    "Commission Payable": "Accrued Expenses",
    "Expenses Payable": "Accrued Expenses",
    "Investor Distributions Payable": "Customer Deposits",
    "Owner Equity": "Owner's Capital",
    "Retained Earnings": "Retained Earnings",
    "Commission Revenue": CURRENT_YEAR_EARNINGS,
    "Property Sales Revenue": CURRENT_YEAR_EARNINGS,
    "Rental Revenue": CURRENT_YEAR_EARNINGS,
    "Operating Expenses": CURRENT_YEAR_EARNINGS,
    "Marketing Expenses": CURRENT_YEAR_EARNINGS,
    "Salaries & Wages": CURRENT_YEAR_EARNINGS,
    "Utilities": CURRENT_YEAR_EARNINGS,
    "Office Rent": CURRENT_YEAR_EARNINGS,
}

LEDGER_ACCOUNT_NORMAL: dict[str, NormalBalance] = {
    "Cash": NormalBalance.DEBIT,
    "Bank Account": NormalBalance.DEBIT,
    "Accounts Receivable": NormalBalance.DEBIT,
    "Commission Receivable": NormalBalance.DEBIT,
    "Property Inventory": NormalBalance.DEBIT,
    "Accounts Payable": NormalBalance.CREDIT,
    "Commission Payable": NormalBalance.CREDIT,
    "Expenses Payable": NormalBalance.CREDIT,
    "Investor Distributions Payable": NormalBalance.CREDIT,
    "Owner Equity": NormalBalance.CREDIT,
    "Retained Earnings": NormalBalance.CREDIT,
    "Commission Revenue": NormalBalance.CREDIT,
    "Property Sales Revenue": NormalBalance.CREDIT,
    "Rental Revenue": NormalBalance.CREDIT,
    "Operating Expenses": NormalBalance.DEBIT,
    "Marketing Expenses": NormalBalance.DEBIT,
    "Salaries & Wages": NormalBalance.DEBIT,
    "Utilities": NormalBalance.DEBIT,
    "Office Rent": NormalBalance.DEBIT,
}


def ledger_posting_balance(ledger_account: str, debit: float, credit: float) -> float:
    """
    Signed effect of one ledger posting on its balance-sheet account.

    Income and expense names fold into current-year earnings, which
    grows with credits. Everything else follows its own normal side.
    """
    if LEDGER_TO_BS_ACCOUNT.get(ledger_account) == CURRENT_YEAR_EARNINGS:
        return credit - debit
    if LEDGER_ACCOUNT_NORMAL.get(ledger_account, NormalBalance.DEBIT) == NormalBalance.DEBIT:
        return debit - credit
    return credit - debit
