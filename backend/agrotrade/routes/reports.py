# Overview: Flask API routes for reporting; parses input and returns JSON responses.

"""
Report routes.

- sales-summary: directors only
- branch-report, inventory, agent-performance: managers and directors;
  managers are pinned to their own branch
Date params (startDate, endDate) accept ISO dates or datetimes; a bare end
date covers that whole day.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import populate_user, require_auth, require_policy
from ..errors import ServiceError, error_response
from ..permissions import DIRECTOR_ONLY, MANAGERS_AND_DIRECTORS, resolve_read_branch
from ..services import reporting_service
from ..validation import validate_branch_param


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _branch() -> str | None:
    return resolve_read_branch(g.current_user, validate_branch_param(request.args.get("branch")))


def _period() -> dict:
    return {"start": request.args.get("startDate"), "end": request.args.get("endDate")}


@reports_bp.get("/sales-summary")
@require_auth
@populate_user
@require_policy(DIRECTOR_ONLY)
def sales_summary_route():
    try:
        return reporting_service.sales_summary(branch=_branch(), **_period()), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to build sales summary")
        return {"error": "Internal server error"}, 500


@reports_bp.get("/branch-report")
@require_auth
@populate_user
@require_policy(MANAGERS_AND_DIRECTORS)
def branch_report_route():
    try:
        return reporting_service.branch_report(branch=_branch(), **_period()), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to build branch report")
        return {"error": "Internal server error"}, 500


@reports_bp.get("/inventory")
@require_auth
@populate_user
@require_policy(MANAGERS_AND_DIRECTORS)
def inventory_report_route():
    try:
        return reporting_service.inventory_report(branch=_branch()), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to build inventory report")
        return {"error": "Internal server error"}, 500


@reports_bp.get("/agent-performance")
@require_auth
@populate_user
@require_policy(MANAGERS_AND_DIRECTORS)
def agent_performance_route():
    try:
        return reporting_service.agent_performance(branch=_branch(), **_period()), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to build agent performance report")
        return {"error": "Internal server error"}, 500
