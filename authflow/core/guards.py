"""
Request guards for bearer-authenticated routes.

A guard is a pure function (GuardRequest, principal) -> GuardResult. Guards
run in order and the first rejection wins, which keeps "no token" and
"expired token" as separate, individually testable outcomes.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from authflow.core.exceptions import TokenExpiredError, UnauthenticatedError
from authflow.services.token_issuer import Principal


class RejectReason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    TOKEN_EXPIRED = "token_expired"


@dataclass(frozen=True)
class GuardRequest:
    path: str
    now: datetime


@dataclass(frozen=True)
class GuardResult:
    allowed: bool
    reason: Optional[RejectReason] = None


ALLOW = GuardResult(allowed=True)

Guard = Callable[[GuardRequest, Optional[Principal]], GuardResult]


def reject(reason: RejectReason) -> GuardResult:
    return GuardResult(allowed=False, reason=reason)


def require_principal(request: GuardRequest, principal: Optional[Principal]) -> GuardResult:
    if principal is None:
        return reject(RejectReason.UNAUTHENTICATED)
    return ALLOW


def require_unexpired_token(request: GuardRequest, principal: Optional[Principal]) -> GuardResult:
    if principal is not None and principal.token.is_expired(request.now):
        return reject(RejectReason.TOKEN_EXPIRED)
    return ALLOW


DEFAULT_GUARDS: Sequence[Guard] = (require_principal, require_unexpired_token)


def run_guards(
    guards: Sequence[Guard],
    request: GuardRequest,
    principal: Optional[Principal],
) -> GuardResult:
    for guard in guards:
        result = guard(request, principal)
        if not result.allowed:
            return result
    return ALLOW


def raise_for_rejection(result: GuardResult) -> None:
    """
    Raises:
        TokenExpiredError: Token presented but past its expiry
        UnauthenticatedError: Any other rejection
    """
    if result.allowed:
        return
    if result.reason == RejectReason.TOKEN_EXPIRED:
        raise TokenExpiredError()
    raise UnauthenticatedError()
