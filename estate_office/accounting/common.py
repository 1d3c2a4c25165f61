"""Helpers shared by the report services."""

from datetime import date, datetime
from typing import Optional, Union

import structlog

from estate_office.audit.logger import AuditLogger
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.base import UserContext, as_date, new_record_id

logger = structlog.get_logger(__name__)


def report_id(prefix: str) -> str:
    return new_record_id(prefix)


def in_period(
    value: Optional[Union[date, datetime]],
    start: date,
    end: date,
) -> bool:
    """Whether a date (or timestamp) falls inside [start, end]."""
    if value is None:
        return False
    day = as_date(value)
    return start <= day <= end


def percentage(part: float, whole: float) -> float:
    """part / whole * 100, or 0 when whole is 0."""
    if not whole:
        return 0.0
    return part / whole * 100


class ReportService:
    """Base for services that generate reports."""

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit = audit_logger

    def _generated(self, report_type: str, report_id: str, user: UserContext) -> None:
        if self._audit is None:
            logger.info(
                "report_generated",
                report_type=report_type,
                report_id=report_id,
                user_id=user.user_id,
            )
            return
        self._audit.log(AuditEventBuilder.report_generated(
            report_type=report_type,
            report_id=report_id,
            user_id=user.user_id,
        ))
