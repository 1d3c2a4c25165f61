"""
Repositories Package

One repository per storage key. Each wraps the raw storage with model
validation, visibility rules and id generation.
"""

from estate_office.repositories.base import RecordRepository
from estate_office.repositories.properties import PropertyRepository, SellCycleRepository
from estate_office.repositories.crm import (
    BuyerRequirementRepository,
    ContactRepository,
    FarmRepository,
    LeadRepository,
)
from estate_office.repositories.deals import DealRepository
from estate_office.repositories.accounting import (
    AccountPaymentRepository,
    EquityTransactionRepository,
    ExpenseRepository,
    JournalEntryRepository,
    LedgerRepository,
)
from estate_office.repositories.investments import (
    InvestmentRepository,
    InvestorRepository,
    LandParcelRepository,
)

__all__ = [
    "RecordRepository",
    # Properties
    "PropertyRepository",
    "SellCycleRepository",
    # CRM
    "BuyerRequirementRepository",
    "ContactRepository",
    "FarmRepository",
    "LeadRepository",
    # Deals
    "DealRepository",
    # Accounting
    "AccountPaymentRepository",
    "EquityTransactionRepository",
    "ExpenseRepository",
    "JournalEntryRepository",
    "LedgerRepository",
    # Investments
    "InvestmentRepository",
    "InvestorRepository",
    "LandParcelRepository",
]
