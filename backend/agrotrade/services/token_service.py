"""
Bearer tokens are HS256 JWTs carrying {userId, email, role}.

The token alone authenticates the caller; the full User is loaded separately
(decorators.populate_user) so deleted users with live tokens are caught.
Every decode failure surfaces as the same Unauthenticated error so clients
cannot tell an expired token from a forged one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import jwt
from flask import current_app

from ..errors import Unauthenticated
from ..time_utils import utcnow


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    role: str


def issue_token(user) -> str:
    now = utcnow()
    payload = {
        "userId": user.id,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(days=current_app.config["JWT_EXPIRES_DAYS"]),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token: str | None) -> TokenClaims:
    if not token:
        raise Unauthenticated("Invalid or expired token")
    try:
        data = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            options={"require": ["exp", "userId", "role"]},
        )
    except jwt.InvalidTokenError as exc:
        current_app.logger.debug("Rejected token: %s", exc)
        raise Unauthenticated("Invalid or expired token") from exc

    user_id = data.get("userId")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise Unauthenticated("Invalid or expired token")
    return TokenClaims(user_id=user_id, email=data.get("email", ""), role=data["role"])
