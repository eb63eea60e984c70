# Overview: Flask API routes for the cash ledger; parses input and returns JSON responses.

"""
Cash Ledger Routes

SECURITY:
- Reading periods, transactions, balances and reports requires VIEW_CASH.
- Opening a period requires CREATE_CASH_PERIODS; editing and activating
  requires MANAGE_CASH_PERIODS; deleting requires DELETE_CASH_PERIODS.
- Recording and editing transactions requires RECORD_CASH_TRANSACTIONS;
  deleting requires DELETE_CASH_TRANSACTIONS.
- Reports: GENERATE_CASH_REPORTS to create, DELETE_CASH_REPORTS to delete.

closing_balance is derived by the ledger service and rejected as input.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..extensions import db
from ..services import ledger_service, report_service
from app.validation import ConflictError, ValidationError, NotFoundError
from .common import date_arg, error_response, page_args, require_int


cash_bp = Blueprint("cash", __name__, url_prefix="/api/cash")


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

@cash_bp.get("/periods")
@require_auth
@require_permission("VIEW_CASH")
def list_periods_route():
    page, limit = page_args()
    return jsonify(ledger_service.list_periods(page=page, limit=limit))


@cash_bp.get("/periods/active")
@require_auth
@require_permission("VIEW_CASH")
def active_period_route():
    period = ledger_service.get_active_period()
    if not period:
        return jsonify({"error": "No active cash period", "code": "NOT_FOUND"}), 404
    return jsonify({"period": period.to_dict()})


@cash_bp.get("/periods/<int:period_id>")
@require_auth
@require_permission("VIEW_CASH")
def get_period_route(period_id: int):
    try:
        period = ledger_service.get_period(period_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"period": period.to_dict()})


@cash_bp.post("/periods")
@require_auth
@require_permission("CREATE_CASH_PERIODS")
def create_period_route():
    """Body: {label, opening_balance?, description?, is_active?}"""
    data = request.get_json(silent=True) or {}
    if "closing_balance" in data:
        return error_response(ValidationError("Field not allowed: closing_balance", "closing_balance"))

    try:
        period = ledger_service.create_period(
            label=data.get("label"),
            opening_balance=data.get("opening_balance", 0),
            description=data.get("description"),
            is_active=data.get("is_active", True) is not False,
        )
        return jsonify({"period": period.to_dict()}), 201
    except (ValidationError, ConflictError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create cash period")
        return jsonify({"error": "Internal server error"}), 500


@cash_bp.patch("/periods/<int:period_id>")
@require_auth
@require_permission("MANAGE_CASH_PERIODS")
def update_period_route(period_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        period = ledger_service.update_period(period_id, payload)
    except (ValidationError, NotFoundError, ConflictError) as e:
        return error_response(e)
    return jsonify({"period": period.to_dict()})


@cash_bp.post("/periods/<int:period_id>/activate")
@require_auth
@require_permission("MANAGE_CASH_PERIODS")
def activate_period_route(period_id: int):
    try:
        period = ledger_service.set_active_period(period_id)
    except (NotFoundError, ConflictError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to activate cash period %s", period_id)
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"period": period.to_dict()})


@cash_bp.delete("/periods/<int:period_id>")
@require_auth
@require_permission("DELETE_CASH_PERIODS")
def delete_period_route(period_id: int):
    try:
        ledger_service.delete_period(period_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Cash period deleted"})


@cash_bp.get("/periods/<int:period_id>/balance")
@require_auth
@require_permission("VIEW_CASH")
def period_balance_route(period_id: int):
    """Query: start_date?, end_date? (inclusive)."""
    try:
        totals = ledger_service.get_balance(period_id, date_arg("start_date"), date_arg("end_date"))
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    return jsonify({"cash_period_id": period_id, "balance": totals.to_dict()})


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

@cash_bp.get("/transactions")
@require_auth
@require_permission("VIEW_CASH")
def list_transactions_route():
    page, limit = page_args()
    try:
        result = ledger_service.list_transactions(
            cash_period_id=request.args.get("cash_period_id", type=int),
            kind=request.args.get("kind"),
            category=request.args.get("category"),
            start_date=date_arg("start_date"),
            end_date=date_arg("end_date"),
            search=request.args.get("search"),
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        return error_response(e)
    return jsonify(result)


@cash_bp.get("/transactions/<int:transaction_id>")
@require_auth
@require_permission("VIEW_CASH")
def get_transaction_route(transaction_id: int):
    try:
        txn = ledger_service.get_transaction(transaction_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"transaction": txn.to_dict()})


@cash_bp.post("/transactions")
@require_auth
@require_permission("RECORD_CASH_TRANSACTIONS")
def record_transaction_route():
    """
    Body: {cash_period_id, kind, amount, date, description, category?, receipt_ref?}

    Returns the transaction and the period with its recomputed closing balance.
    """
    data = request.get_json(silent=True) or {}

    try:
        txn = ledger_service.record_transaction(
            cash_period_id=require_int(data, "cash_period_id"),
            kind=data.get("kind"),
            amount=data.get("amount"),
            date=data.get("date"),
            description=data.get("description"),
            category=data.get("category"),
            receipt_ref=data.get("receipt_ref"),
            created_by=g.current_user.id,
        )
        return jsonify({"transaction": txn.to_dict(), "period": txn.cash_period.to_dict()}), 201
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to record cash transaction")
        return jsonify({"error": "Internal server error"}), 500


@cash_bp.patch("/transactions/<int:transaction_id>")
@require_auth
@require_permission("RECORD_CASH_TRANSACTIONS")
def update_transaction_route(transaction_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        txn = ledger_service.update_transaction(transaction_id, payload)
        return jsonify({"transaction": txn.to_dict(), "period": txn.cash_period.to_dict()})
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update cash transaction %s", transaction_id)
        return jsonify({"error": "Internal server error"}), 500


@cash_bp.delete("/transactions/<int:transaction_id>")
@require_auth
@require_permission("DELETE_CASH_TRANSACTIONS")
def delete_transaction_route(transaction_id: int):
    try:
        ledger_service.delete_transaction(transaction_id)
    except NotFoundError as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete cash transaction %s", transaction_id)
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"message": "Cash transaction deleted"})


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

@cash_bp.get("/reports")
@require_auth
@require_permission("VIEW_CASH")
def list_reports_route():
    page, limit = page_args()
    return jsonify(report_service.list_reports(
        cash_period_id=request.args.get("cash_period_id", type=int),
        page=page,
        limit=limit,
    ))


@cash_bp.get("/reports/<int:report_id>")
@require_auth
@require_permission("VIEW_CASH")
def get_report_route(report_id: int):
    try:
        report = report_service.get_report(report_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"report": report.to_dict()})


@cash_bp.post("/reports")
@require_auth
@require_permission("GENERATE_CASH_REPORTS")
def generate_report_route():
    """Body: {cash_period_id, label, start_date?, end_date?}"""
    data = request.get_json(silent=True) or {}

    try:
        report = report_service.generate_report(
            cash_period_id=require_int(data, "cash_period_id"),
            label=data.get("label"),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            generated_by=g.current_user.id,
        )
        return jsonify({"report": report.to_dict()}), 201
    except (ValidationError, NotFoundError) as e:
        return error_response(e)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to generate cash report")
        return jsonify({"error": "Internal server error"}), 500


@cash_bp.delete("/reports/<int:report_id>")
@require_auth
@require_permission("DELETE_CASH_REPORTS")
def delete_report_route(report_id: int):
    try:
        report_service.delete_report(report_id)
    except NotFoundError as e:
        return error_response(e)
    return jsonify({"message": "Cash report deleted"})
