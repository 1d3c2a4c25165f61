"""
Record Validation

DESIGN DECISION: Validation happens BEFORE a record is saved and is
separate from the pydantic models.

The models reject data that cannot be stored at all (missing ids,
negative amounts, shares that do not total 100%). This module checks
what a person typed into a form against business rules and returns
every problem at once, so the form can show them together:

- Format checks (phone numbers, CNIC, email)
- Duplicate checks against existing records (investors)
- Double-entry balance checks (journal entries)
- Commission split totals

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review. The formatting helpers at the end
of the module are for display and are never applied implicitly.
"""

import re
from typing import Optional

from pydantic import BaseModel, Field

from estate_office.accounting.chart import is_chart_account
from estate_office.audit.logger import AuditLogger
from estate_office.config import get_settings
from estate_office.deals.commissions import validate_commission_splits
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.accounting import JournalEntry
from estate_office.models.deal import CommissionAgent
from estate_office.repositories import InvestorRepository

LEAD_PHONE_PATTERN = re.compile(r"(\+92|0)?[0-9]{10}")
PAKISTANI_MOBILE_PATTERN = re.compile(r"0?3\d{9}|92?3\d{9}")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
CNIC_PATTERN = re.compile(r"\d{13}")


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(..., description="Field with the issue")
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'duplicate')"
    )
    message: str = Field(..., description="Human-readable description of the issue")
    severity: str = Field(..., pattern="^(error|warning|info)$")
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """All issues found for one record."""

    entity_type: str
    entity_id: Optional[str] = None
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Valid when there are no error-level issues. Warnings are okay."""
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


def _strip_chars(value: str, strip: str) -> str:
    return re.sub(strip, "", value)


def _clean_phone(phone: str) -> str:
    return _strip_chars(phone, r"[\s\-+]")


def _clean_cnic(cnic: str) -> str:
    return cnic.replace("-", "")


class RecordValidator:
    """
    Validates form data for leads, investors, journal entries and
    commission splits.

    Duplicate checks need the investor repository; without it they
    are skipped.
    """

    def __init__(
        self,
        investors: Optional[InvestorRepository] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._investors = investors
        self._audit = audit_logger
        self._tolerance = get_settings().accounting.balance_tolerance

    def _finish(self, result: ValidationResult) -> ValidationResult:
        if self._audit and not result.is_valid:
            self._audit.log(AuditEventBuilder.validation_failed(
                entity_type=result.entity_type,
                entity_id=result.entity_id,
                issues=[issue.model_dump() for issue in result.issues],
            ))
        return result

    # ========================================================================
    # LEADS
    # ========================================================================

    def validate_lead(
        self,
        name: str,
        phone: str = "",
        email: Optional[str] = None,
        lead_id: Optional[str] = None,
    ) -> ValidationResult:
        issues = []

        if len(name.strip()) < 2:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_short",
                message="Name must be at least 2 characters",
                severity="error",
            ))

        if phone and not LEAD_PHONE_PATTERN.fullmatch(_strip_chars(phone, r"[-\s]")):
            issues.append(ValidationIssue(
                field="phone",
                issue_type="invalid_format",
                message="Invalid phone number format",
                severity="error",
                suggested_fix="Use 03XXXXXXXXX or +923XXXXXXXXX",
            ))

        if email and not EMAIL_PATTERN.fullmatch(email):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Invalid email format",
                severity="error",
            ))

        return self._finish(ValidationResult(entity_type="lead", entity_id=lead_id, issues=issues))

    # ========================================================================
    # INVESTORS
    # ========================================================================

    def validate_investor(
        self,
        name: str,
        phone: str,
        email: Optional[str] = None,
        cnic: Optional[str] = None,
        investor_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Check an investor's identity fields.

        investor_id is the record being edited; it is ignored in the
        duplicate checks so an investor never duplicates themself.
        """
        issues = []

        if not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Investor name is required",
                severity="error",
            ))

        if not phone or not PAKISTANI_MOBILE_PATTERN.fullmatch(_clean_phone(phone)):
            issues.append(ValidationIssue(
                field="phone",
                issue_type="invalid_format",
                message="Invalid Pakistani phone number",
                severity="error",
                suggested_fix="Use 03XXXXXXXXX or +923XXXXXXXXX",
            ))

        if email and not EMAIL_PATTERN.fullmatch(email):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Invalid email format",
                severity="error",
            ))

        if cnic and not CNIC_PATTERN.fullmatch(_clean_cnic(cnic)):
            issues.append(ValidationIssue(
                field="cnic",
                issue_type="invalid_format",
                message="CNIC must have 13 digits",
                severity="error",
                suggested_fix="Use the format XXXXX-XXXXXXX-X",
            ))

        issues.extend(self._investor_duplicates(phone, email, cnic, investor_id))
        return self._finish(
            ValidationResult(entity_type="investor", entity_id=investor_id, issues=issues)
        )

    def _investor_duplicates(
        self,
        phone: str,
        email: Optional[str],
        cnic: Optional[str],
        investor_id: Optional[str],
    ) -> list[ValidationIssue]:
        if self._investors is None:
            return []

        others = [i for i in self._investors.list_all() if i.id != investor_id]
        issues = []

        if email and any(i.email and i.email.lower() == email.lower() for i in others):
            issues.append(ValidationIssue(
                field="email",
                issue_type="duplicate",
                message="An investor with this email already exists",
                severity="error",
            ))

        if phone and any(i.phone and _clean_phone(i.phone) == _clean_phone(phone) for i in others):
            issues.append(ValidationIssue(
                field="phone",
                issue_type="duplicate",
                message="An investor with this phone number already exists",
                severity="error",
            ))

        if cnic and any(i.cnic and _clean_cnic(i.cnic) == _clean_cnic(cnic) for i in others):
            issues.append(ValidationIssue(
                field="cnic",
                issue_type="duplicate",
                message="An investor with this CNIC already exists",
                severity="error",
            ))

        return issues

    # ========================================================================
    # JOURNAL ENTRIES
    # ========================================================================

    def validate_journal_entry(self, entry: JournalEntry) -> ValidationResult:
        """Double-entry checks for both the flat and the nested format."""
        issues = []

        if entry.has_flat_lines:
            if not entry.debit_account or not entry.credit_account:
                issues.append(ValidationIssue(
                    field="accounts",
                    issue_type="missing",
                    message="Both a debit and a credit account are required",
                    severity="error",
                ))
            debit = entry.debit_amount or 0.0
            credit = entry.credit_amount or 0.0
            if abs(debit - credit) >= self._tolerance:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="unbalanced",
                    message=f"Debit ({debit:,.2f}) does not equal credit ({credit:,.2f})",
                    severity="error",
                ))
            if debit == 0 and credit == 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="zero_value",
                    message="Journal entry has no value",
                    severity="warning",
                ))
            for account in (entry.debit_account, entry.credit_account):
                if account and not is_chart_account(account):
                    issues.append(self._unknown_account(account))

        if entry.entries:
            total_debit = sum(line.debit for line in entry.entries)
            total_credit = sum(line.credit for line in entry.entries)
            if abs(total_debit - total_credit) >= self._tolerance:
                issues.append(ValidationIssue(
                    field="entries",
                    issue_type="unbalanced",
                    message=(
                        f"Entry lines do not balance: debits {total_debit:,.2f}, "
                        f"credits {total_credit:,.2f}"
                    ),
                    severity="error",
                ))
            if total_debit == 0 and total_credit == 0:
                issues.append(ValidationIssue(
                    field="entries",
                    issue_type="zero_value",
                    message="Journal entry has no value",
                    severity="warning",
                ))
            for line in entry.entries:
                if not is_chart_account(line.account_name):
                    issues.append(self._unknown_account(line.account_name))

        if not entry.has_flat_lines and not entry.entries:
            issues.append(ValidationIssue(
                field="entries",
                issue_type="missing",
                message="Journal entry has no lines",
                severity="error",
            ))

        return self._finish(
            ValidationResult(entity_type="journal_entry", entity_id=entry.id, issues=issues)
        )

    @staticmethod
    def _unknown_account(account: str) -> ValidationIssue:
        return ValidationIssue(
            field="account",
            issue_type="unknown_account",
            message=f"Account '{account}' is not in the chart of accounts",
            severity="warning",
            suggested_fix="It will be reported under account 9999",
        )

    # ========================================================================
    # COMMISSION SPLITS
    # ========================================================================

    def validate_commission_splits(
        self,
        agents: list[CommissionAgent],
        agency_percentage: float,
        deal_id: Optional[str] = None,
    ) -> ValidationResult:
        issues = []
        check = validate_commission_splits(agents, agency_percentage)
        if not check.valid:
            issues.append(ValidationIssue(
                field="commission",
                issue_type="invalid_split",
                message=check.message,
                severity="error",
            ))
        return self._finish(ValidationResult(entity_type="deal", entity_id=deal_id, issues=issues))


# ============================================================================
# FORMATTING
# ============================================================================

def format_cnic(cnic: str) -> str:
    """XXXXX-XXXXXXX-X. Input with fewer than 13 digits is returned as given."""
    if not cnic:
        return ""
    cleaned = _clean_cnic(cnic)
    if len(cleaned) >= 13:
        return f"{cleaned[:5]}-{cleaned[5:12]}-{cleaned[12]}"
    return cnic


def format_pakistani_phone(phone: str) -> str:
    """03XX-XXXXXXX. International 92... numbers get a leading 0."""
    if not phone:
        return ""
    cleaned = _clean_phone(phone)
    if cleaned.startswith("92"):
        cleaned = "0" + cleaned[2:]
    if len(cleaned) >= 11 and cleaned.startswith("0"):
        return f"{cleaned[:4]}-{cleaned[4:]}"
    return phone
