# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..decorators import populate_user, require_auth
from ..errors import ServiceError, error_response
from ..services import auth_service, token_service
from ..validation import validate_login, validate_registration


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user) -> dict:
    return {
        "token": token_service.issue_token(user),
        "role": user.role,
        "userId": user.id,
        "name": user.name,
        "branch": user.branch,
    }


@auth_bp.post("/register")
def register_route():
    """
    Register a staff account and sign it in.

    Body: name, email, password, confirmPassword, role, branch, contact
    """
    try:
        fields = validate_registration(request.get_json(silent=True))
        user = auth_service.create_user(**fields)
        return _session_payload(user), 201
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to register user")
        return {"error": "Internal server error"}, 500


@auth_bp.post("/login")
def login_route():
    """Exchange email and password for a bearer token."""
    try:
        email, password = validate_login(request.get_json(silent=True))
        user = auth_service.authenticate(email, password)
        if not user:
            current_app.logger.warning("Failed login for %s from %s", email, request.remote_addr)
            return {"error": "Invalid email or password"}, 401
        return _session_payload(user), 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to login user")
        return {"error": "Internal server error"}, 500


@auth_bp.get("/me")
@require_auth
@populate_user
def me_route():
    try:
        return {"user": g.current_user.to_dict()}, 200
    except Exception:
        current_app.logger.exception("Failed to load current user")
        return {"error": "Internal server error"}, 500


@auth_bp.get("/profile/<int:user_id>")
@require_auth
@populate_user
def profile_route(user_id: int):
    try:
        user = auth_service.get_profile(g.current_user, user_id)
        return {"user": user.to_dict()}, 200
    except ServiceError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load profile")
        return {"error": "Internal server error"}, 500
