"""
Report Models for Estate Office

Reports are derived, never stored. They are plain pydantic models so
the UI can render them and the exporters can walk them.
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from estate_office.models.accounting import AccountType, EquityTransaction, NormalBalance
from estate_office.models.base import utcnow


class ReportPeriod(BaseModel):
    start_date: date
    end_date: date


class DateRange(BaseModel):
    start: date
    end: date


class ComparisonRanges(BaseModel):
    current: DateRange
    previous: DateRange


class GeneratedReport(BaseModel):
    """Common header of every generated report."""

    id: str
    generated_at: datetime = Field(default_factory=utcnow)
    generated_by: str = Field(default="")


# ============================================================================
# TRIAL BALANCE
# ============================================================================

class AccountBalance(BaseModel):
    account_code: str
    account_name: str
    account_type: AccountType
    debit_balance: float = 0.0
    credit_balance: float = 0.0
    normal_balance: NormalBalance


class TrialBalance(GeneratedReport):
    as_of_date: date
    accounts: list[AccountBalance] = Field(default_factory=list)
    total_debits: float = 0.0
    total_credits: float = 0.0
    difference: float = 0.0
    is_balanced: bool = True


# ============================================================================
# PROFIT & LOSS
# ============================================================================

class RevenueSection(BaseModel):
    commission_revenue: float = 0.0
    rental_income: float = 0.0
    consulting_fees: float = 0.0
    other_income: float = 0.0
    total_revenue: float = 0.0


class ExpenseSection(BaseModel):
    salaries_wages: float = 0.0
    marketing_advertising: float = 0.0
    office_expenses: float = 0.0
    utilities: float = 0.0
    depreciation: float = 0.0
    other_expenses: float = 0.0
    total_expenses: float = 0.0


class ProfitAndLoss(GeneratedReport):
    period: ReportPeriod
    revenue: RevenueSection = Field(default_factory=RevenueSection)
    expenses: ExpenseSection = Field(default_factory=ExpenseSection)
    gross_profit: float = 0.0
    operating_income: float = 0.0
    net_income: float = 0.0


# ============================================================================
# BALANCE SHEET
# ============================================================================

class CurrentAssets(BaseModel):
    cash_and_bank: float = 0.0
    accounts_receivable: float = 0.0
    prepaid_expenses: float = 0.0
    total_current_assets: float = 0.0


class NonCurrentAssets(BaseModel):
    property_inventory: float = 0.0
    fixed_assets: float = 0.0
    total_non_current_assets: float = 0.0


class AssetSection(BaseModel):
    current_assets: CurrentAssets = Field(default_factory=CurrentAssets)
    non_current_assets: NonCurrentAssets = Field(default_factory=NonCurrentAssets)
    total_assets: float = 0.0


class CurrentLiabilities(BaseModel):
    accounts_payable: float = 0.0
    accrued_expenses: float = 0.0
    customer_deposits: float = 0.0
    total_current_liabilities: float = 0.0


class LongTermLiabilities(BaseModel):
    loans_payable: float = 0.0
    total_long_term_liabilities: float = 0.0


class LiabilitySection(BaseModel):
    current_liabilities: CurrentLiabilities = Field(default_factory=CurrentLiabilities)
    long_term_liabilities: LongTermLiabilities = Field(default_factory=LongTermLiabilities)
    total_liabilities: float = 0.0


class EquitySection(BaseModel):
    owners_capital: float = 0.0
    retained_earnings: float = 0.0
    current_year_earnings: float = 0.0
    total_equity: float = 0.0


class BalanceSheet(GeneratedReport):
    as_of_date: date
    assets: AssetSection = Field(default_factory=AssetSection)
    liabilities: LiabilitySection = Field(default_factory=LiabilitySection)
    equity: EquitySection = Field(default_factory=EquitySection)
    total_liabilities_and_equity: float = 0.0
    is_balanced: bool = True


# ============================================================================
# CASH FLOW
# ============================================================================

class OperatingAdjustments(BaseModel):
    depreciation: float = 0.0
    accounts_receivable_change: float = 0.0
    accounts_payable_change: float = 0.0
    total_adjustments: float = 0.0


class OperatingActivities(BaseModel):
    net_income: float = 0.0
    adjustments: OperatingAdjustments = Field(default_factory=OperatingAdjustments)
    net_cash_from_operating: float = 0.0


class InvestingActivities(BaseModel):
    property_purchases: float = 0.0
    property_disposals: float = 0.0
    net_cash_from_investing: float = 0.0


class FinancingActivities(BaseModel):
    owner_contributions: float = 0.0
    owner_withdrawals: float = 0.0
    loan_proceeds: float = 0.0
    loan_repayments: float = 0.0
    net_cash_from_financing: float = 0.0


class CashFlowStatement(GeneratedReport):
    period: ReportPeriod
    operating_activities: OperatingActivities = Field(default_factory=OperatingActivities)
    investing_activities: InvestingActivities = Field(default_factory=InvestingActivities)
    financing_activities: FinancingActivities = Field(default_factory=FinancingActivities)
    net_cash_change: float = 0.0
    beginning_cash: float = 0.0
    ending_cash: float = 0.0


# ============================================================================
# CHANGES IN EQUITY
# ============================================================================

class ChangesInEquity(GeneratedReport):
    period: ReportPeriod
    beginning_balance: float = 0.0
    net_income: float = 0.0
    contributions: float = 0.0
    withdrawals: float = 0.0
    dividends: float = 0.0
    ending_balance: float = 0.0
    transactions: list[EquityTransaction] = Field(default_factory=list)


# ============================================================================
# PERFORMANCE REPORTS
# ============================================================================

class CommissionLine(BaseModel):
    property_id: str
    property_title: str
    deal_type: Literal["sale", "rental"] = "sale"
    deal_value: float
    commission_rate: float
    commission_amount: float
    agent_id: str
    agent_name: str
    closed_date: Optional[date] = None


class CommissionSummary(BaseModel):
    total_deals: int = 0
    total_deal_value: float = 0.0
    total_commission: float = 0.0
    average_commission_rate: float = 0.0
    sales_commission: float = 0.0
    rental_commission: float = 0.0


class AgentCommissionTotal(BaseModel):
    agent_id: str
    agent_name: str
    deals_count: int
    total_commission: float


class CommissionReport(GeneratedReport):
    period: ReportPeriod
    commissions: list[CommissionLine] = Field(default_factory=list)
    summary: CommissionSummary = Field(default_factory=CommissionSummary)
    by_agent: list[AgentCommissionTotal] = Field(default_factory=list)


class ExpenseLine(BaseModel):
    id: str
    date: date
    category: str
    description: str
    amount: float
    payment_method: str


class CategoryTotal(BaseModel):
    category: str
    count: int
    total: float
    percentage: float


class MonthTotal(BaseModel):
    month: str
    total: float


class ExpenseSummary(BaseModel):
    total_expenses: float = 0.0
    transaction_count: int = 0
    average_expense: float = 0.0
    largest_category: str = "N/A"
    largest_category_amount: float = 0.0


class ExpenseSummaryReport(GeneratedReport):
    period: ReportPeriod
    expenses: list[ExpenseLine] = Field(default_factory=list)
    by_category: list[CategoryTotal] = Field(default_factory=list)
    by_month: list[MonthTotal] = Field(default_factory=list)
    summary: ExpenseSummary = Field(default_factory=ExpenseSummary)


class PropertyPerformanceLine(BaseModel):
    id: str
    title: str
    property_type: str
    status: str
    listing_date: date
    sold_date: Optional[date] = None
    days_on_market: int
    list_price: float
    sold_price: Optional[float] = None
    price_change: float
    price_change_percentage: float
    commission_earned: float
    agent_name: str


class PropertyPerformanceSummary(BaseModel):
    total_properties: int = 0
    active_listings: int = 0
    sold_properties: int = 0
    average_days_on_market: float = 0.0
    average_price_change: float = 0.0
    total_commission_earned: float = 0.0
    conversion_rate: float = 0.0


class StatusCount(BaseModel):
    status: str
    count: int
    percentage: float


class TopPerformer(BaseModel):
    id: str
    title: str
    commission_earned: float
    days_on_market: int


class PropertyPerformanceReport(GeneratedReport):
    period: ReportPeriod
    properties: list[PropertyPerformanceLine] = Field(default_factory=list)
    summary: PropertyPerformanceSummary = Field(default_factory=PropertyPerformanceSummary)
    by_status: list[StatusCount] = Field(default_factory=list)
    top_performers: list[TopPerformer] = Field(default_factory=list)


class DistributionLine(BaseModel):
    investor_id: str
    investor_name: str
    property_id: str
    property_title: str
    investment_amount: float
    ownership_percentage: float
    distribution_amount: float
    distribution_date: Optional[date] = None
    roi: float


class DistributionSummary(BaseModel):
    total_investors: int = 0
    total_distributed: float = 0.0
    total_investment_capital: float = 0.0
    average_roi: float = 0.0
    largest_distribution: float = 0.0


class InvestorDistributionTotal(BaseModel):
    investor_id: str
    investor_name: str
    distributions_count: int
    total_distributed: float
    total_invested: float
    roi: float


class InvestorDistributionReport(GeneratedReport):
    period: ReportPeriod
    distributions: list[DistributionLine] = Field(default_factory=list)
    summary: DistributionSummary = Field(default_factory=DistributionSummary)
    by_investor: list[InvestorDistributionTotal] = Field(default_factory=list)


# ============================================================================
# TAX
# ============================================================================

class PropertyTaxLine(BaseModel):
    property_id: str
    property_title: str
    assessed_value: float
    tax_rate: float
    tax_amount: float


class PropertyTaxSection(BaseModel):
    total: float = 0.0
    by_property: list[PropertyTaxLine] = Field(default_factory=list)


class IncomeTaxSection(BaseModel):
    gross_income: float = 0.0
    allowable_deductions: float = 0.0
    taxable_income: float = 0.0
    tax_rate: float = 0.0
    tax_owed: float = 0.0


class CapitalGainLine(BaseModel):
    property_id: str
    sale_price: float
    cost_basis: float
    gain: float
    tax_rate: float
    tax: float


class CapitalGainsSection(BaseModel):
    short_term: list[CapitalGainLine] = Field(default_factory=list)
    long_term: list[CapitalGainLine] = Field(default_factory=list)
    total_short_term_tax: float = 0.0
    total_long_term_tax: float = 0.0


class WithholdingSection(BaseModel):
    salaries: float = 0.0
    commissions: float = 0.0
    contractor_payments: float = 0.0
    total: float = 0.0


class TaxPeriod(ReportPeriod):
    fiscal_year: int


class TaxSummaryReport(BaseModel):
    period: TaxPeriod
    property_tax: PropertyTaxSection = Field(default_factory=PropertyTaxSection)
    income_tax: IncomeTaxSection = Field(default_factory=IncomeTaxSection)
    capital_gains_tax: CapitalGainsSection = Field(default_factory=CapitalGainsSection)
    withholding_tax: WithholdingSection = Field(default_factory=WithholdingSection)
    total_tax_liability: float = 0.0
    estimated_payments: float = 0.0
    balance_due: float = 0.0
    generated_at: datetime = Field(default_factory=utcnow)


class AgedLine(BaseModel):
    id: str
    entity_type: str
    entity_id: str
    description: str
    amount: float
    due_date: date
    days_overdue: int
    contact_id: str
    contact_name: str


class AgedBucket(BaseModel):
    items: list[AgedLine] = Field(default_factory=list)
    total: float = 0.0
    count: int = 0


class AgedReport(BaseModel):
    as_of_date: date
    report_type: Literal["receivables", "payables"]
    current: AgedBucket = Field(default_factory=AgedBucket)
    days_1_to_30: AgedBucket = Field(default_factory=AgedBucket)
    days_31_to_60: AgedBucket = Field(default_factory=AgedBucket)
    days_61_to_90: AgedBucket = Field(default_factory=AgedBucket)
    days_90_plus: AgedBucket = Field(default_factory=AgedBucket)
    grand_total: float = 0.0
    overdue_total: float = 0.0
    overdue_percentage: float = 0.0

    def buckets(self) -> list[tuple[str, AgedBucket]]:
        """Buckets in ageing order with their display labels."""
        return [
            ("Current", self.current),
            ("1-30 Days", self.days_1_to_30),
            ("31-60 Days", self.days_31_to_60),
            ("61-90 Days", self.days_61_to_90),
            ("90+ Days", self.days_90_plus),
        ]


# ============================================================================
# COMPARISONS
# ============================================================================

class MetricChange(BaseModel):
    current: float
    previous: float
    change: float
    change_percentage: float


class ReportComparison(BaseModel):
    comparison_type: Literal["YoY", "MoM", "Custom"] = "YoY"
    current_id: str
    previous_id: str
    changes: dict[str, MetricChange] = Field(default_factory=dict)
