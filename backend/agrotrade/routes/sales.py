# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..constants import SALE_TYPES
from ..decorators import enforce_branch, populate_user, require_auth, require_policy
from ..errors import ServiceError, ValidationError, error_response
from ..permissions import ANY_STAFF, SALES_WRITE, resolve_read_branch
from ..services import sales_service
from ..units import kg_to_tonnes
from ..validation import validate_branch_param, validate_sale


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _listing(sales) -> dict:
    return {
        "count": len(sales),
        "totalSales": sales_service.total_paid(sales),
        "sales": [s.to_dict() for s in sales],
    }


@sales_bp.post("")
@require_auth
@populate_user
@require_policy(SALES_WRITE)
def create_sale_route():
    """
    Record an immediate-payment sale and decrement stock.

    Body: produceName, tonnage, amountPaid, buyerName, branch
    """
    try:
        fields = validate_sale(request.get_json(silent=True))
        enforce_branch(fields["branch"])
        sale, remaining = sales_service.record_sale(agent=g.current_user, fields=fields)
        return {
            "message": "Sale recorded successfully",
            "sale": sale.to_dict(),
            "remainingStock": kg_to_tonnes(remaining),
        }, 201
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return {"error": "Internal server error"}, 500


@sales_bp.get("")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def list_sales_route():
    """Query params: branch, saleType (both optional)."""
    try:
        branch = resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))
        sale_type = request.args.get("saleType") or None
        if sale_type and sale_type not in SALE_TYPES:
            raise ValidationError([f"saleType must be one of: {', '.join(SALE_TYPES)}"])
        return _listing(sales_service.list_sales(branch=branch, sale_type=sale_type)), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return {"error": "Internal server error"}, 500


@sales_bp.get("/agent/<int:agent_id>")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def agent_sales_route(agent_id: int):
    try:
        branch = resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))
        return _listing(sales_service.list_sales(branch=branch, agent_id=agent_id)), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list agent sales")
        return {"error": "Internal server error"}, 500


@sales_bp.get("/<int:sale_id>")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def get_sale_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
        resolve_read_branch(g.current_user, sale.branch)
        return sale.to_dict(), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load sale")
        return {"error": "Internal server error"}, 500
