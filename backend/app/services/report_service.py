# Overview: Service-layer operations for cash reports; encapsulates business logic and database work.

"""
Cash Report Snapshots

WHY: A report freezes the ledger totals of a period at the moment it is
generated. Later transactions never change an existing report; there is no
update operation, only soft deletion.
"""

from flask import current_app

from ..extensions import db
from ..models import CashReport
from . import ledger_service
from .pagination import paginate
from app.time_utils import utcnow
from app.validation import NotFoundError, ValidationError


def generate_report(
    cash_period_id: int,
    label: str,
    start_date=None,
    end_date=None,
    generated_by: int | None = None,
) -> CashReport:
    """
    Snapshot totals for a period, optionally limited to an inclusive date range.

    closing_balance = opening_balance + inflow - outflow over the range, so a
    ranged report can differ from the period's own closing balance.

    Raises:
        NotFoundError: period missing or deleted
        ValidationError: blank label, bad dates, start_date after end_date
    """
    label = str(label or "").strip()
    if not label:
        raise ValidationError("label is required", "label")
    if len(label) > 50:
        raise ValidationError("label exceeds max length 50", "label")

    start_date = ledger_service.coerce_date(start_date, "start_date")
    end_date = ledger_service.coerce_date(end_date, "end_date")
    totals = ledger_service.get_balance(cash_period_id, start_date, end_date)

    report = CashReport(
        cash_period_id=cash_period_id,
        label=label,
        start_date=start_date,
        end_date=end_date,
        total_inflow=totals.total_inflow,
        total_outflow=totals.total_outflow,
        opening_balance=totals.opening_balance,
        closing_balance=totals.closing_balance,
        generated_by=generated_by,
        generated_at=utcnow(),
    )
    db.session.add(report)
    db.session.commit()

    current_app.logger.info("Cash report %s generated for period %s", report.id, cash_period_id)
    return report


def get_report(report_id: int) -> CashReport:
    report = db.session.get(CashReport, report_id)
    if not report or report.deleted_at is not None:
        raise NotFoundError("Cash report not found")
    return report


def list_reports(cash_period_id: int | None = None, page: int | None = None, limit: int | None = None) -> dict:
    query = db.session.query(CashReport).filter(CashReport.deleted_at.is_(None))
    if cash_period_id is not None:
        query = query.filter(CashReport.cash_period_id == cash_period_id)
    query = query.order_by(CashReport.generated_at.desc(), CashReport.id.desc())
    return paginate(query, page, limit)


def delete_report(report_id: int) -> None:
    report = get_report(report_id)
    report.deleted_at = utcnow()
    db.session.commit()
