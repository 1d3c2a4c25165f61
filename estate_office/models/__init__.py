"""
Data Models Package

This package contains all Pydantic models used by Estate Office.
Every record read from or written to storage must conform to these schemas.
"""

from estate_office.models.base import (
    CamelModel,
    StoredRecord,
    UserContext,
    UserRole,
    new_record_id,
    utcnow,
)
from estate_office.models.property import (
    AGENCY_OWNER_ID,
    InvestorShare,
    OwnerType,
    OwnershipRecord,
    Property,
    PropertyStatus,
    PropertyType,
    SellCycle,
    SellCycleStatus,
)
from estate_office.models.crm import (
    BuyerRequirement,
    Contact,
    ContactStatus,
    ContactType,
    Farm,
    FarmType,
    Lead,
    LeadIntent,
    LeadInteraction,
    LeadPriority,
    LeadStatus,
    RequirementStatus,
)
from estate_office.models.deal import (
    DEAL_STAGE_ORDER,
    AgentKind,
    CommissionAgent,
    CommissionSplit,
    CommissionStatus,
    Deal,
    DealAgents,
    DealCommission,
    DealFinancial,
    DealLifecycle,
    DealParties,
    DealParty,
    DealPayment,
    DealPaymentStatus,
    DealStage,
    DealStatus,
    SplitShare,
)
from estate_office.models.accounting import (
    AccountPayment,
    AccountPaymentStatus,
    AccountPaymentType,
    AccountType,
    EquityTransaction,
    EquityTransactionType,
    Expense,
    ExpenseStatus,
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
    JournalSourceType,
    LedgerEntry,
    NormalBalance,
)
from estate_office.models.investment import (
    FeasibilityFactors,
    InvestmentStatus,
    Investor,
    InvestorInvestment,
    InvestorStatus,
    LandParcel,
    LandStage,
    LegalStatus,
)
from estate_office.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Base
    "CamelModel",
    "StoredRecord",
    "UserContext",
    "UserRole",
    "new_record_id",
    "utcnow",
    # Property models
    "AGENCY_OWNER_ID",
    "InvestorShare",
    "OwnerType",
    "OwnershipRecord",
    "Property",
    "PropertyStatus",
    "PropertyType",
    "SellCycle",
    "SellCycleStatus",
    # CRM models
    "BuyerRequirement",
    "Contact",
    "ContactStatus",
    "ContactType",
    "Farm",
    "FarmType",
    "Lead",
    "LeadIntent",
    "LeadInteraction",
    "LeadPriority",
    "LeadStatus",
    "RequirementStatus",
    # Deal models
    "DEAL_STAGE_ORDER",
    "AgentKind",
    "CommissionAgent",
    "CommissionSplit",
    "CommissionStatus",
    "Deal",
    "DealAgents",
    "DealCommission",
    "DealFinancial",
    "DealLifecycle",
    "DealParties",
    "DealParty",
    "DealPayment",
    "DealPaymentStatus",
    "DealStage",
    "DealStatus",
    "SplitShare",
    # Accounting models
    "AccountPayment",
    "AccountPaymentStatus",
    "AccountPaymentType",
    "AccountType",
    "EquityTransaction",
    "EquityTransactionType",
    "Expense",
    "ExpenseStatus",
    "JournalEntry",
    "JournalEntryStatus",
    "JournalLine",
    "JournalSourceType",
    "LedgerEntry",
    "NormalBalance",
    # Investment models
    "FeasibilityFactors",
    "InvestmentStatus",
    "Investor",
    "InvestorInvestment",
    "InvestorStatus",
    "LandParcel",
    "LandStage",
    "LegalStatus",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
