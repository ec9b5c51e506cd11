"""
Access policies for every protected endpoint.

Each policy names the roles allowed to call the endpoint and how the caller's
branch relates to the branch of the record being touched. Routes declare a
policy with @require_policy; the guard evaluates the role part before the
handler runs and the branch part once the handler knows the target branch.

BRANCH RULES:
- owns_branch: caller.branch must equal the target branch
- cross_branch_roles: roles exempt from owns_branch
- Reads resolve their branch filter through resolve_read_branch
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    ROLES,
    ROLE_AGENT,
    ROLE_DIRECTOR,
    ROLE_MANAGER,
)
from .errors import Forbidden


@dataclass(frozen=True)
class AccessPolicy:
    roles: tuple[str, ...]
    owns_branch: bool = False
    cross_branch_roles: frozenset[str] = frozenset()
    branch_denied_message: str = "You can only act on records from your assigned branch"

    def check_role(self, role: str | None) -> None:
        if role not in self.roles:
            raise Forbidden(
                f"Access denied. Required roles: {', '.join(self.roles)}. Your role: {role}",
                details={"requiredRoles": list(self.roles), "role": role},
            )

    def check_branch(self, user, target_branch: str) -> None:
        if not self.owns_branch or user.role in self.cross_branch_roles:
            return
        if user.branch != target_branch:
            raise Forbidden(self.branch_denied_message)


# -- INVENTORY --

# Directors are bound to their own branch for produce writes too.
PROCUREMENT_WRITE = AccessPolicy(
    roles=(ROLE_MANAGER, ROLE_DIRECTOR),
    owns_branch=True,
    branch_denied_message="You can only record or update produce for your assigned branch",
)

# -- SALES --

SALES_WRITE = AccessPolicy(
    roles=(ROLE_MANAGER, ROLE_AGENT, ROLE_DIRECTOR),
    owns_branch=True,
    cross_branch_roles=frozenset({ROLE_DIRECTOR}),
    branch_denied_message="You can only record sales for your assigned branch",
)

CREDIT_STATUS_WRITE = AccessPolicy(
    roles=(ROLE_MANAGER, ROLE_AGENT, ROLE_DIRECTOR),
    owns_branch=True,
    cross_branch_roles=frozenset({ROLE_DIRECTOR}),
    branch_denied_message="You can only update credit sales from your assigned branch",
)

# -- READS & REPORTS --

ANY_STAFF = AccessPolicy(roles=ROLES)

DIRECTOR_ONLY = AccessPolicy(roles=(ROLE_DIRECTOR,))

MANAGERS_AND_DIRECTORS = AccessPolicy(roles=(ROLE_MANAGER, ROLE_DIRECTOR))


def resolve_read_branch(user, requested: str | None) -> str | None:
    """
    Branch filter for listings, alerts and reports.

    Directors see every branch unless they name one. Everyone else is pinned
    to their own branch; naming another branch is refused.
    Returns None for "all branches".
    """
    if user.role == ROLE_DIRECTOR:
        return requested
    if requested and requested != user.branch:
        raise Forbidden(f"{user.role.capitalize()}s can only view records for their own branch")
    return user.branch
