# Overview: Service-layer operations for the cash ledger; encapsulates business logic and database work.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import CashPeriod, CashTransaction, TRANSACTION_KINDS
from .concurrency import lock_for_update
from .pagination import paginate
from app.time_utils import parse_iso_date, utcnow
from app.validation import (
    CENT,
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_date_range,
    parse_amount,
    validate_payload,
)
"""
Cash Ledger Invariants (authoritative)

- closing_balance = opening_balance + sum(inflow) - sum(outflow) over the
  period's current transactions. It is recomputed from an aggregate query
  inside the same DB transaction as every insert, update or delete; it is
  never adjusted incrementally and never written by clients.
- Writers lock the parent period row first so concurrent writes to one
  period serialize (SELECT ... FOR UPDATE; SQLite serializes writers anyway).
- At most one period is active. Activation deactivates every other period in
  the same transaction; a partial unique index rejects any interleaving that
  would commit two active rows.
- Amounts are non-negative; kind carries the sign.
"""


PERIOD_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"label", "description", "opening_balance", "is_active"},
)

TRANSACTION_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"date", "kind", "category", "description", "amount", "receipt_ref"},
    choices={"kind": TRANSACTION_KINDS},
)


@dataclass(frozen=True)
class LedgerTotals:
    opening_balance: Decimal
    total_inflow: Decimal
    total_outflow: Decimal
    closing_balance: Decimal

    def to_dict(self) -> dict:
        return {
            "opening_balance": f"{self.opening_balance:.2f}",
            "total_inflow": f"{self.total_inflow:.2f}",
            "total_outflow": f"{self.total_outflow:.2f}",
            "closing_balance": f"{self.closing_balance:.2f}",
        }


def _money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0)).quantize(CENT)


def coerce_date(value, field: str = "date") -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date", field)


def _validate_kind(kind: str) -> str:
    if not isinstance(kind, str) or kind not in TRANSACTION_KINDS:
        raise ValidationError("kind must be one of: inflow, outflow", "kind")
    return kind


def _validate_label(label) -> str:
    label = str(label or "").strip()
    if not label:
        raise ValidationError("label is required", "label")
    if len(label) > 50:
        raise ValidationError("label exceeds max length 50", "label")
    return label


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def _sum_for(kind: str):
    return db.func.coalesce(
        db.func.sum(db.case((CashTransaction.kind == kind, CashTransaction.amount), else_=0)),
        0,
    )


def _flow_totals(cash_period_id: int, start_date: date | None = None, end_date: date | None = None) -> tuple[Decimal, Decimal]:
    query = db.session.query(_sum_for("inflow"), _sum_for("outflow")).filter(
        CashTransaction.cash_period_id == cash_period_id
    )
    if start_date is not None:
        query = query.filter(CashTransaction.date >= start_date)
    if end_date is not None:
        query = query.filter(CashTransaction.date <= end_date)

    inflow, outflow = query.one()
    return _money(inflow), _money(outflow)


def _recompute_closing(period: CashPeriod) -> Decimal:
    """Derive closing_balance from the transactions currently in the session."""
    db.session.flush()
    inflow, outflow = _flow_totals(period.id)
    period.closing_balance = _money(period.opening_balance) + inflow - outflow
    return period.closing_balance


def get_balance(cash_period_id: int, start_date: date | None = None, end_date: date | None = None) -> LedgerTotals:
    """
    Pure read of ledger totals for a period.

    Date bounds are inclusive. closing_balance here is opening + inflow -
    outflow over the selected range, so with a range it can differ from the
    period's stored closing_balance.
    """
    period = get_period(cash_period_id)
    start_date = coerce_date(start_date, "start_date")
    end_date = coerce_date(end_date, "end_date")
    enforce_date_range(start_date, end_date)

    opening = _money(period.opening_balance)
    inflow, outflow = _flow_totals(period.id, start_date, end_date)

    return LedgerTotals(
        opening_balance=opening,
        total_inflow=inflow,
        total_outflow=outflow,
        closing_balance=opening + inflow - outflow,
    )


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

def get_period(cash_period_id: int) -> CashPeriod:
    period = db.session.get(CashPeriod, cash_period_id)
    if not period or period.deleted_at is not None:
        raise NotFoundError("Cash period not found")
    return period


def _lock_period(cash_period_id: int) -> CashPeriod:
    period = lock_for_update(
        db.session.query(CashPeriod).filter(
            CashPeriod.id == cash_period_id,
            CashPeriod.deleted_at.is_(None),
        )
    ).first()
    if not period:
        raise NotFoundError("Cash period not found")
    return period


def _deactivate_all() -> None:
    db.session.query(CashPeriod).filter(CashPeriod.is_active.is_(True)).update(
        {CashPeriod.is_active: False}, synchronize_session="fetch"
    )


def _commit_activation() -> None:
    """Commit a write that may activate a period; a concurrent activation loses on the single-active index."""
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Another cash period was activated concurrently; retry")


def get_active_period() -> CashPeriod | None:
    return db.session.query(CashPeriod).filter(
        CashPeriod.is_active.is_(True),
        CashPeriod.deleted_at.is_(None),
    ).first()


def list_periods(page: int | None = None, limit: int | None = None) -> dict:
    query = db.session.query(CashPeriod).filter(CashPeriod.deleted_at.is_(None))
    query = query.order_by(CashPeriod.created_at.desc(), CashPeriod.id.desc())
    return paginate(query, page, limit)


def create_period(
    label: str,
    opening_balance=0,
    description: str | None = None,
    is_active: bool = True,
) -> CashPeriod:
    """
    Open a new period. New periods are active by default, which deactivates
    whichever period was active before.
    """
    label = _validate_label(label)
    opening = parse_amount(opening_balance, "opening_balance")

    if is_active:
        _deactivate_all()

    period = CashPeriod(
        label=label,
        description=description,
        opening_balance=opening,
        closing_balance=opening,
        is_active=bool(is_active),
    )
    db.session.add(period)
    _commit_activation()

    current_app.logger.info("Cash period %s (%s) created", period.id, period.label)
    return period


def update_period(cash_period_id: int, payload: dict) -> CashPeriod:
    """Patch label / description / opening_balance / is_active."""
    patch = validate_payload(model=CashPeriod, payload=payload, policy=PERIOD_UPDATE_POLICY, partial=True)
    if "label" in patch:
        patch["label"] = _validate_label(patch["label"])

    period = _lock_period(cash_period_id)

    if patch.get("is_active") is True and not period.is_active:
        _deactivate_all()

    for key, value in patch.items():
        setattr(period, key, value)

    if "opening_balance" in patch:
        _recompute_closing(period)

    _commit_activation()
    return period


def set_active_period(cash_period_id: int) -> CashPeriod:
    """
    Make one period the active one.

    Single transaction: deactivate every active period, then activate the
    target. Idempotent for the already-active period.
    """
    period = _lock_period(cash_period_id)

    _deactivate_all()
    db.session.flush()
    period.is_active = True
    _commit_activation()

    current_app.logger.info("Cash period %s activated", period.id)
    return period


def delete_period(cash_period_id: int) -> None:
    """Soft delete; a deleted period is never active."""
    period = _lock_period(cash_period_id)
    period.is_active = False
    period.deleted_at = utcnow()
    db.session.commit()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

def get_transaction(transaction_id: int) -> CashTransaction:
    txn = db.session.get(CashTransaction, transaction_id)
    if not txn or txn.cash_period is None or txn.cash_period.deleted_at is not None:
        raise NotFoundError("Cash transaction not found")
    return txn


def record_transaction(
    cash_period_id: int,
    kind: str,
    amount,
    date,
    description: str,
    category: str | None = None,
    receipt_ref: str | None = None,
    created_by: int | None = None,
) -> CashTransaction:
    """
    Insert a transaction and recompute the period's closing balance.

    Raises:
        NotFoundError: period missing or deleted
        ValidationError: bad kind, amount, date or blank description
    """
    _validate_kind(kind)
    amount = parse_amount(amount)
    txn_date = coerce_date(date)
    if txn_date is None:
        raise ValidationError("date is required", "date")
    description = str(description or "").strip()
    if not description:
        raise ValidationError("description is required", "description")

    period = _lock_period(cash_period_id)

    txn = CashTransaction(
        cash_period_id=period.id,
        date=txn_date,
        kind=kind,
        category=category,
        description=description,
        amount=amount,
        receipt_ref=receipt_ref,
        created_by=created_by,
    )
    db.session.add(txn)
    _recompute_closing(period)
    db.session.commit()

    current_app.logger.info(
        "Cash %s of %s recorded in period %s (closing %s)",
        kind, amount, period.id, period.closing_balance,
    )
    return txn


def update_transaction(transaction_id: int, payload: dict) -> CashTransaction:
    """Patch a transaction; it never moves to another period."""
    txn = get_transaction(transaction_id)
    patch = validate_payload(model=CashTransaction, payload=payload, policy=TRANSACTION_UPDATE_POLICY, partial=True)

    period = _lock_period(txn.cash_period_id)

    for key, value in patch.items():
        setattr(txn, key, value)

    _recompute_closing(period)
    db.session.commit()
    return txn


def delete_transaction(transaction_id: int) -> None:
    txn = get_transaction(transaction_id)
    period = _lock_period(txn.cash_period_id)

    db.session.delete(txn)
    _recompute_closing(period)
    db.session.commit()


def list_transactions(
    cash_period_id: int | None = None,
    kind: str | None = None,
    category: str | None = None,
    start_date=None,
    end_date=None,
    search: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    """
    Page through transactions of live periods, newest first.

    The result carries total_inflow / total_outflow over the whole filtered
    set, not just the current page.
    """
    start_date = coerce_date(start_date, "start_date")
    end_date = coerce_date(end_date, "end_date")
    enforce_date_range(start_date, end_date)

    filters = [CashPeriod.deleted_at.is_(None)]
    if cash_period_id is not None:
        filters.append(CashTransaction.cash_period_id == cash_period_id)
    if kind:
        filters.append(CashTransaction.kind == _validate_kind(kind))
    if category:
        filters.append(CashTransaction.category == category)
    if start_date is not None:
        filters.append(CashTransaction.date >= start_date)
    if end_date is not None:
        filters.append(CashTransaction.date <= end_date)
    if search:
        filters.append(CashTransaction.description.ilike(f"%{search}%"))

    query = (
        db.session.query(CashTransaction)
        .join(CashPeriod, CashTransaction.cash_period_id == CashPeriod.id)
        .filter(*filters)
        .order_by(CashTransaction.date.desc(), CashTransaction.id.desc())
    )
    result = paginate(query, page, limit)

    inflow, outflow = (
        db.session.query(_sum_for("inflow"), _sum_for("outflow"))
        .select_from(CashTransaction)
        .join(CashPeriod, CashTransaction.cash_period_id == CashPeriod.id)
        .filter(*filters)
        .one()
    )
    result["total_inflow"] = f"{_money(inflow):.2f}"
    result["total_outflow"] = f"{_money(outflow):.2f}"
    return result
