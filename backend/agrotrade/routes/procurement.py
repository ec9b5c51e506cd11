# Overview: Flask API routes for procurement (produce lots); parses input and returns JSON responses.

"""
Procurement routes.

- POST and PUT require manager/director and the caller's branch must match
  the produce branch (directors included).
- Reads are open to every role, pinned to the caller's branch unless the
  caller is a director.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import enforce_branch, populate_user, require_auth, require_policy
from ..errors import ServiceError, error_response
from ..permissions import ANY_STAFF, PROCUREMENT_WRITE, resolve_read_branch
from ..services import inventory_service
from ..validation import validate_branch_param, validate_procurement


procurement_bp = Blueprint("procurement", __name__, url_prefix="/api/procurement")


@procurement_bp.post("")
@require_auth
@populate_user
@require_policy(PROCUREMENT_WRITE)
def create_procurement_route():
    try:
        fields = validate_procurement(request.get_json(silent=True))
        enforce_branch(fields["branch"])
        produce = inventory_service.record_procurement(recorded_by=g.current_user, fields=fields)
        return {"message": "Procurement recorded successfully", "produce": produce.to_dict()}, 201
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record procurement")
        return {"error": "Internal server error"}, 500


@procurement_bp.get("")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def list_procurement_route():
    """Query params: branch (optional)."""
    try:
        branch = resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))
        produces = inventory_service.list_produce(branch)
        return {"count": len(produces), "produces": [p.to_dict() for p in produces]}, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list procurement")
        return {"error": "Internal server error"}, 500


@procurement_bp.get("/alerts/out-of-stock")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def out_of_stock_route():
    try:
        branch = resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))
        items = inventory_service.out_of_stock(branch)
        return {
            "count": len(items),
            "message": f"{len(items)} items out of stock" if items else "All items in stock",
            "items": [p.to_dict() for p in items],
        }, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list out-of-stock produce")
        return {"error": "Internal server error"}, 500


@procurement_bp.get("/<int:produce_id>")
@require_auth
@populate_user
@require_policy(ANY_STAFF)
def get_procurement_route(produce_id: int):
    try:
        produce = inventory_service.get_produce(produce_id)
        resolve_read_branch(g.current_user, produce.branch)
        return produce.to_dict(), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load produce")
        return {"error": "Internal server error"}, 500


@procurement_bp.put("/<int:produce_id>")
@require_auth
@populate_user
@require_policy(PROCUREMENT_WRITE)
def update_procurement_route(produce_id: int):
    """Partial update of descriptive and price fields; stock and branch are fixed."""
    try:
        patch = validate_procurement(request.get_json(silent=True), partial=True)
        produce = inventory_service.get_produce(produce_id)
        enforce_branch(produce.branch)
        produce = inventory_service.update_produce(produce, patch)
        return {"message": "Produce updated successfully", "produce": produce.to_dict()}, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update produce")
        return {"error": "Internal server error"}, 500
