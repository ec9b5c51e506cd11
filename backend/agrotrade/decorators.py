# Overview: Request guards for API routes: token check, user loading, access policies.

from functools import wraps

from flask import current_app, g, jsonify, request

from .errors import Forbidden, NotFound, Unauthenticated
from .permissions import AccessPolicy
from .services import auth_service, token_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def _log_denied(status: int, reason: str) -> None:
    claims = getattr(g, "claims", None)
    current_app.logger.warning(
        "Access denied status=%s method=%s path=%s user=%s reason=%s",
        status, request.method, request.path, claims.user_id if claims else None, reason,
    )


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.claims (TokenClaims: user_id, email, role). Missing, malformed,
    expired and badly signed tokens all answer the same generic 401.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            g.claims = token_service.decode_token(_bearer_token())
        except Unauthenticated as e:
            _log_denied(401, e.message)
            return jsonify(e.to_dict()), 401
        return f(*args, **kwargs)

    return decorated_function


def populate_user(f):
    """
    Load the full User named by the token into g.current_user.

    Must run after @require_auth. A token whose user no longer exists is 404.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not hasattr(g, "claims"):
            return jsonify({"error": "User not authenticated"}), 401
        try:
            g.current_user = auth_service.get_user(g.claims.user_id)
        except NotFound as e:
            _log_denied(404, e.message)
            return jsonify(e.to_dict()), 404
        return f(*args, **kwargs)

    return decorated_function


def require_policy(policy: AccessPolicy):
    """
    Enforce the role part of an access policy and remember the policy for
    enforce_branch. Must run after @populate_user.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                return jsonify({"error": "User not authenticated"}), 401
            try:
                policy.check_role(user.role)
            except Forbidden as e:
                _log_denied(403, e.message)
                return jsonify(e.to_dict()), 403
            g.policy = policy
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def enforce_branch(target_branch: str) -> None:
    """
    Branch half of the active policy, called by handlers once the target
    record (or requested branch) is known. Raises Forbidden.
    """
    try:
        g.policy.check_branch(g.current_user, target_branch)
    except Forbidden as e:
        _log_denied(403, e.message)
        raise
