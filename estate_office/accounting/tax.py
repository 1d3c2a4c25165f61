"""
Tax and Ageing Reports

DESIGN DECISION: The tax summary is an ESTIMATE.
Rates come from AccountingSettings. Capital gains are not tracked per
sale, so they are backed out of commission revenue: the commission is
divided by an assumed commission rate to get a sale value, and an
assumed cost ratio gives the cost basis. The report says so by using
"estimated" as the property id on every gain line.

Ageing reports bucket open receivables and payables by whole days
past their due date (or their date when no due date is set).
"""

from datetime import date
from typing import Literal, Optional

from estate_office.accounting.common import ReportService, percentage
from estate_office.audit.logger import AuditLogger
from estate_office.config import get_settings
from estate_office.models.accounting import (
    AccountPaymentStatus,
    AccountPaymentType,
    AccountType,
    ExpenseStatus,
    JournalEntry,
)
from estate_office.models.base import UserContext
from estate_office.models.property import PropertyStatus
from estate_office.models.reports import (
    AgedLine,
    AgedReport,
    CapitalGainLine,
    CapitalGainsSection,
    IncomeTaxSection,
    PropertyTaxLine,
    PropertyTaxSection,
    TaxPeriod,
    TaxSummaryReport,
    WithholdingSection,
)
from estate_office.repositories import (
    AccountPaymentRepository,
    ExpenseRepository,
    JournalEntryRepository,
    PropertyRepository,
)


class TaxReports(ReportService):
    """Tax summary and aged receivables/payables."""

    def __init__(
        self,
        journal: JournalEntryRepository,
        properties: PropertyRepository,
        expenses: ExpenseRepository,
        payments: AccountPaymentRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._journal = journal
        self._properties = properties
        self._expenses = expenses
        self._payments = payments
        self._settings = get_settings().accounting

    # ========================================================================
    # TAX SUMMARY
    # ========================================================================

    def generate_tax_summary_report(self, start: date, end: date, user: UserContext) -> TaxSummaryReport:
        """Estimated tax position for a period."""
        rates = self._settings
        entries = [e for e in self._journal.posted_for(user) if start <= e.date <= end]
        expenses = [e for e in self._expenses.list_for(user) if start <= e.date <= end]

        property_tax = self._property_tax(user)

        gross_income = sum(
            line.credit
            for entry in entries
            for line in entry.entries
            if line.account_type == AccountType.REVENUE and line.credit > 0
        )
        deductions = sum(e.amount for e in expenses if e.deductible)
        taxable = max(0.0, gross_income - deductions)
        income_tax = IncomeTaxSection(
            gross_income=gross_income,
            allowable_deductions=deductions,
            taxable_income=taxable,
            tax_rate=rates.income_tax_rate,
            tax_owed=taxable * rates.income_tax_rate,
        )

        capital_gains = self._capital_gains(entries)

        def withheld(category: str, rate: float) -> float:
            return sum(e.amount * rate for e in expenses if e.category == category)

        salaries = withheld("Salaries & Wages", rates.salary_withholding_rate)
        commissions = withheld("Commission Revenue", rates.commission_withholding_rate)
        contractors = withheld("Professional Fees", rates.contractor_withholding_rate)
        withholding = WithholdingSection(
            salaries=salaries,
            commissions=commissions,
            contractor_payments=contractors,
            total=salaries + commissions + contractors,
        )

        total = (
            property_tax.total
            + income_tax.tax_owed
            + capital_gains.total_short_term_tax
            + capital_gains.total_long_term_tax
        )
        report = TaxSummaryReport(
            period=TaxPeriod(start_date=start, end_date=end, fiscal_year=start.year),
            property_tax=property_tax,
            income_tax=income_tax,
            capital_gains_tax=capital_gains,
            withholding_tax=withholding,
            total_tax_liability=total,
            estimated_payments=0.0,
            balance_due=total,
        )
        self._generated("tax_summary", f"TAX-{start.year}", user)
        return report

    def _property_tax(self, user: UserContext) -> PropertyTaxSection:
        rate = self._settings.property_tax_rate
        lines = [
            PropertyTaxLine(
                property_id=p.id,
                property_title=p.display_title,
                assessed_value=p.price,
                tax_rate=rate,
                tax_amount=p.price * rate,
            )
            for p in self._properties.list_for(user)
            if p.status != PropertyStatus.SOLD
        ]
        return PropertyTaxSection(total=sum(line.tax_amount for line in lines), by_property=lines)

    def _capital_gains(self, entries: list[JournalEntry]) -> CapitalGainsSection:
        rates = self._settings
        long_term_held = rates.assumed_holding_period_days > rates.long_term_holding_days
        tax_rate = (
            rates.long_term_capital_gains_rate if long_term_held
            else rates.short_term_capital_gains_rate
        )

        gains = []
        for entry in entries:
            for line in entry.entries:
                if line.account_name != "Commission Revenue" or line.credit <= 0:
                    continue
                sale_value = line.credit / rates.assumed_commission_rate
                cost_basis = sale_value * rates.assumed_cost_ratio
                gain = sale_value - cost_basis
                gains.append(CapitalGainLine(
                    property_id="estimated",
                    sale_price=sale_value,
                    cost_basis=cost_basis,
                    gain=gain,
                    tax_rate=tax_rate,
                    tax=gain * tax_rate,
                ))

        section = CapitalGainsSection()
        if long_term_held:
            section.long_term = gains
            section.total_long_term_tax = sum(g.tax for g in gains)
        else:
            section.short_term = gains
            section.total_short_term_tax = sum(g.tax for g in gains)
        return section

    # ========================================================================
    # AGED RECEIVABLES & PAYABLES
    # ========================================================================

    def generate_aged_receivables(self, as_of: date, user: UserContext) -> AgedReport:
        """Pending receivable account payments, aged by due date."""
        lines = []
        for payment in self._payments.list_for(user):
            if payment.status != AccountPaymentStatus.PENDING:
                continue
            if payment.payment_type != AccountPaymentType.RECEIVABLE:
                continue
            due = payment.due_date or payment.date
            lines.append(AgedLine(
                id=payment.id,
                entity_type="commission",
                entity_id=payment.id,
                description=payment.description or f"Payment - {payment.category}",
                amount=payment.amount,
                due_date=due,
                days_overdue=(as_of - due).days,
                contact_id=payment.payee or "unknown",
                contact_name=payment.payee or "Unknown",
            ))
        report = bucket_aged_items(lines, as_of, "receivables")
        self._generated("aged_receivables", f"AR-{as_of.isoformat()}", user)
        return report

    def generate_aged_payables(self, as_of: date, user: UserContext) -> AgedReport:
        """Pending expenses, aged by due date."""
        lines = []
        for expense in self._expenses.list_for(user):
            if expense.status != ExpenseStatus.PENDING:
                continue
            due = expense.due_date or expense.date
            lines.append(AgedLine(
                id=expense.id,
                entity_type="expense",
                entity_id=expense.id,
                description=expense.description or expense.category,
                amount=expense.amount,
                due_date=due,
                days_overdue=(as_of - due).days,
                contact_id=expense.vendor or "unknown",
                contact_name=expense.vendor or "Unknown Vendor",
            ))
        report = bucket_aged_items(lines, as_of, "payables")
        self._generated("aged_payables", f"AP-{as_of.isoformat()}", user)
        return report


def bucket_aged_items(
    items: list[AgedLine],
    as_of: date,
    report_type: Literal["receivables", "payables"],
) -> AgedReport:
    """
    Sort items into ageing buckets.

    Days overdue are recomputed against as_of. Zero or fewer days is
    current; the rest fall into 1-30, 31-60, 61-90 and 90+.
    """
    report = AgedReport(as_of_date=as_of, report_type=report_type)
    for item in items:
        item.days_overdue = (as_of - item.due_date).days
        if item.days_overdue <= 0:
            bucket = report.current
        elif item.days_overdue <= 30:
            bucket = report.days_1_to_30
        elif item.days_overdue <= 60:
            bucket = report.days_31_to_60
        elif item.days_overdue <= 90:
            bucket = report.days_61_to_90
        else:
            bucket = report.days_90_plus
        bucket.items.append(item)

    for _, bucket in report.buckets():
        bucket.total = sum(item.amount for item in bucket.items)
        bucket.count = len(bucket.items)

    report.grand_total = sum(bucket.total for _, bucket in report.buckets())
    report.overdue_total = report.grand_total - report.current.total
    report.overdue_percentage = percentage(report.overdue_total, report.grand_total)
    return report
