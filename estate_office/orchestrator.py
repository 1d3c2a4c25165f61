"""
Main Orchestrator for Estate Office

This module wires storage, repositories, services and reports into a
single EstateOffice container that the UI (or a script) works with.

DESIGN DECISION: Everything shares ONE storage backend and ONE audit
logger. Repositories never talk to each other; the services that
span several record types (the deal pipeline, ownership transfers)
receive the repositories they need here.

Wiring order matters only where services depend on services:
portfolios -> ownership -> deal pipeline.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from estate_office.accounting import FinancialStatements, PerformanceReports, TaxReports
from estate_office.audit import AuditLogger, configure_logging
from estate_office.config import get_settings
from estate_office.deals import CommissionBook, DealPipeline
from estate_office.investments import PortfolioService
from estate_office.properties import OwnershipService, PropertyMatcher
from estate_office.repositories import (
    AccountPaymentRepository,
    BuyerRequirementRepository,
    ContactRepository,
    DealRepository,
    EquityTransactionRepository,
    ExpenseRepository,
    FarmRepository,
    InvestmentRepository,
    InvestorRepository,
    JournalEntryRepository,
    LandParcelRepository,
    LeadRepository,
    LedgerRepository,
    PropertyRepository,
    SellCycleRepository,
)
from estate_office.services.storage import (
    LocalJsonStorage,
    RecordAuditStorage,
    RecordStorageInterface,
)
from estate_office.validation import RecordValidator

logger = structlog.get_logger(__name__)


@dataclass
class EstateOffice:
    """Every repository and service of one back office, sharing one store."""

    storage: RecordStorageInterface
    audit_logger: AuditLogger

    # Repositories
    properties: PropertyRepository
    sell_cycles: SellCycleRepository
    leads: LeadRepository
    contacts: ContactRepository
    requirements: BuyerRequirementRepository
    farms: FarmRepository
    deals: DealRepository
    journal: JournalEntryRepository
    ledger: LedgerRepository
    expenses: ExpenseRepository
    payments: AccountPaymentRepository
    equity: EquityTransactionRepository
    investors: InvestorRepository
    investments: InvestmentRepository
    land_parcels: LandParcelRepository

    # Services
    portfolios: PortfolioService
    ownership: OwnershipService
    pipeline: DealPipeline
    commissions: CommissionBook
    matcher: PropertyMatcher
    validator: RecordValidator

    # Reports
    statements: FinancialStatements
    performance: PerformanceReports
    tax: TaxReports


def create_app_components(
    storage: Optional[RecordStorageInterface] = None,
) -> EstateOffice:
    """
    Factory function to create all application components.

    Args:
        storage: Record storage to use. Defaults to JSON files under
                 the configured data directory.

    Returns:
        The wired EstateOffice
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    if storage is None:
        storage = LocalJsonStorage(settings.storage.data_dir)
    audit_logger = AuditLogger(RecordAuditStorage(storage))

    properties = PropertyRepository(storage, audit_logger)
    sell_cycles = SellCycleRepository(storage, audit_logger)
    deals = DealRepository(storage, audit_logger)
    journal = JournalEntryRepository(storage, audit_logger)
    ledger = LedgerRepository(storage, audit_logger)
    expenses = ExpenseRepository(storage, audit_logger)
    payments = AccountPaymentRepository(storage, audit_logger)
    equity = EquityTransactionRepository(storage, audit_logger)
    investors = InvestorRepository(storage, audit_logger)
    investments = InvestmentRepository(storage, audit_logger)

    portfolios = PortfolioService(investors, investments)
    ownership = OwnershipService(properties, portfolios, audit_logger)

    office = EstateOffice(
        storage=storage,
        audit_logger=audit_logger,
        properties=properties,
        sell_cycles=sell_cycles,
        leads=LeadRepository(storage, audit_logger),
        contacts=ContactRepository(storage, audit_logger),
        requirements=BuyerRequirementRepository(storage, audit_logger),
        farms=FarmRepository(storage, audit_logger),
        deals=deals,
        journal=journal,
        ledger=ledger,
        expenses=expenses,
        payments=payments,
        equity=equity,
        investors=investors,
        investments=investments,
        land_parcels=LandParcelRepository(storage, audit_logger),
        portfolios=portfolios,
        ownership=ownership,
        pipeline=DealPipeline(deals, properties, sell_cycles, ownership, audit_logger),
        commissions=CommissionBook(deals, audit_logger),
        matcher=PropertyMatcher(properties, sell_cycles),
        validator=RecordValidator(investors, audit_logger),
        statements=FinancialStatements(
            journal, ledger, properties, expenses, equity, audit_logger
        ),
        performance=PerformanceReports(
            deals, properties, expenses, investors, investments, audit_logger
        ),
        tax=TaxReports(journal, properties, expenses, payments, audit_logger),
    )
    logger.info("app_components_created", storage=type(storage).__name__)
    return office
