# Overview: Flask API routes for credit sale operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..constants import CREDIT_OVERDUE, CREDIT_PENDING, CREDIT_STATUSES
from ..decorators import enforce_branch, populate_user, require_auth, require_policy
from ..errors import ServiceError, ValidationError, error_response
from ..permissions import ANY_STAFF, CREDIT_STATUS_WRITE, SALES_WRITE, resolve_read_branch
from ..services import credit_service
from ..units import kg_to_tonnes
from ..validation import validate_branch_param, validate_credit_sale, validate_status


credit_sales_bp = Blueprint("credit_sales", __name__, url_prefix="/api/credit-sales")


def _status_param() -> str | None:
    status = request.args.get("status") or None
    if status and status not in CREDIT_STATUSES:
        raise ValidationError([f"status must be one of: {', '.join(CREDIT_STATUSES)}"])
    return status


@credit_sales_bp.post("")
@require_auth
@populate_user
@require_policy(SALES_WRITE)
def create_credit_sale_route():
    """
    Record a deferred-payment sale and decrement stock.

    Body: buyerName, nin, location, contact, amountDue, produceName,
          tonnage, dueDate, branch
    """
    try:
        fields = validate_credit_sale(request.get_json(silent=True))
        enforce_branch(fields["branch"])
        credit_sale, remaining = credit_service.record_credit_sale(agent=g.current_user, fields=fields)
        return {
            "message": "Credit sale recorded successfully",
            "creditSale": credit_sale.to_dict(),
            "remainingStock": kg_to_tonnes(remaining),
        }, 201
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record credit sale")
        return {"error": "Internal server error"}, 500


@credit_sales_bp.get("")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def list_credit_sales_route():
    """Query params: branch, status (both optional)."""
    try:
        branch = resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))
        credit_sales = credit_service.list_credit_sales(branch=branch, status=_status_param())
        return {
            "count": len(credit_sales),
            "totalPending": credit_service.sum_due(credit_sales, CREDIT_PENDING),
            "totalOverdue": credit_service.sum_due(credit_sales, CREDIT_OVERDUE),
            "totalDue": credit_service.sum_due(credit_sales),
            "creditSales": [cs.to_dict() for cs in credit_sales],
        }, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list credit sales")
        return {"error": "Internal server error"}, 500


@credit_sales_bp.get("/agent/<int:agent_id>")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def agent_credit_sales_route(agent_id: int):
    try:
        branch = resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))
        credit_sales = credit_service.list_credit_sales(
            branch=branch, status=_status_param(), agent_id=agent_id,
        )
        return {
            "count": len(credit_sales),
            "totalDue": credit_service.sum_due(credit_sales),
            "creditSales": [cs.to_dict() for cs in credit_sales],
        }, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list agent credit sales")
        return {"error": "Internal server error"}, 500


@credit_sales_bp.put("/<int:credit_sale_id>/status")
@require_auth
@populate_user
@require_policy(CREDIT_STATUS_WRITE)
def update_status_route(credit_sale_id: int):
    """Body: status (pending | paid | overdue). Any transition is allowed."""
    try:
        status = validate_status(request.get_json(silent=True))
        credit_sale = credit_service.get_credit_sale(credit_sale_id)
        enforce_branch(credit_sale.branch)
        credit_sale = credit_service.update_status(credit_sale, status, actor_id=g.current_user.id)
        return {"message": f"Credit sale marked as {status}", "creditSale": credit_sale.to_dict()}, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update credit sale status")
        return {"error": "Internal server error"}, 500


@credit_sales_bp.get("/alerts/overdue")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def overdue_alert_route():
    """Unpaid credit sales past their due date, oldest due date first."""
    try:
        branch = resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))
        overdue = credit_service.overdue_credit_sales(branch=branch)
        return {
            "count": len(overdue),
            "totalOverdue": credit_service.sum_due(overdue),
            "overdue": [cs.to_dict() for cs in overdue],
        }, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list overdue credit sales")
        return {"error": "Internal server error"}, 500
