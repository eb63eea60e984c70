from __future__ import annotations

from ..extensions import db
from app.time_utils import to_utc_z, to_iso_date


TRANSACTION_KINDS = {"inflow", "outflow"}


def _money(value) -> str | None:
    if value is None:
        return None
    return f"{value:.2f}"


class CashPeriod(db.Model):
    """
    A bounded accounting interval (e.g. "2024/2025").

    INVARIANTS:
    - closing_balance = opening_balance + sum(inflow) - sum(outflow) over the
      period's transactions; recomputed by ledger_service after every write
    - at most one row has is_active = true (partial unique index)

    Soft-deleted; deleting also deactivates.
    """
    __tablename__ = "cash_periods"
    __table_args__ = (
        db.Index(
            "uq_cash_periods_single_active",
            "is_active",
            unique=True,
            sqlite_where=db.text("is_active = 1"),
            postgresql_where=db.text("is_active"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    label = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=True)
    opening_balance = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    closing_balance = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=False)

    deleted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "opening_balance": _money(self.opening_balance),
            "closing_balance": _money(self.closing_balance),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CashTransaction(db.Model):
    """
    A signed movement of cash inside a period. amount is never negative;
    kind carries the sign. Hard-deleted.
    """
    __tablename__ = "cash_transactions"
    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_cash_transactions_amount_non_negative"),
        db.Index("ix_cash_transactions_period_date", "cash_period_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cash_period_id = db.Column(db.Integer, db.ForeignKey("cash_periods.id"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)

    # inflow, outflow
    kind = db.Column(db.String(16), nullable=False)

    category = db.Column(db.String(100), nullable=True)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Numeric(15, 2), nullable=False)

    # Receipt reference from the file storage collaborator
    receipt_ref = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    cash_period = db.relationship("CashPeriod", backref=db.backref("transactions", lazy=True))
    creator = db.relationship("Member")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cash_period_id": self.cash_period_id,
            "date": to_iso_date(self.date),
            "kind": self.kind,
            "category": self.category,
            "description": self.description,
            "amount": _money(self.amount),
            "receipt_ref": self.receipt_ref,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CashReport(db.Model):
    """
    Frozen snapshot of ledger totals for a period, optionally restricted to
    a date range. Computed once at creation; never recomputed or edited.
    """
    __tablename__ = "cash_reports"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    cash_period_id = db.Column(db.Integer, db.ForeignKey("cash_periods.id"), nullable=False, index=True)
    label = db.Column(db.String(50), nullable=False)

    # Inclusive date range the totals were computed over (NULL = unbounded)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)

    total_inflow = db.Column(db.Numeric(15, 2), nullable=False)
    total_outflow = db.Column(db.Numeric(15, 2), nullable=False)
    opening_balance = db.Column(db.Numeric(15, 2), nullable=False)
    closing_balance = db.Column(db.Numeric(15, 2), nullable=False)

    generated_by = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=True)
    generated_at = db.Column(db.DateTime, nullable=False)
    deleted_at = db.Column(db.DateTime, nullable=True)

    cash_period = db.relationship("CashPeriod", backref=db.backref("reports", lazy=True))
    generator = db.relationship("Member")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cash_period_id": self.cash_period_id,
            "cash_period_label": self.cash_period.label if self.cash_period else None,
            "label": self.label,
            "start_date": to_iso_date(self.start_date),
            "end_date": to_iso_date(self.end_date),
            "total_inflow": _money(self.total_inflow),
            "total_outflow": _money(self.total_outflow),
            "opening_balance": _money(self.opening_balance),
            "closing_balance": _money(self.closing_balance),
            "generated_by": self.generated_by,
            "generated_by_name": self.generator.name if self.generator else None,
            "generated_at": to_utc_z(self.generated_at),
        }
