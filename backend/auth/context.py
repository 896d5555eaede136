"""Request context resolution and the authorization wrapper for operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Concatenate, ParamSpec, TypeVar
from uuid import UUID

from backend.auth.credentials import CredentialVerifier
from backend.errors import AuthenticationFailedError
from backend.repositories.users_repository import UsersRepository


logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")
S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Per-request identity, threaded explicitly into every operation."""

    user_id: UUID | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls) -> RequestContext:
        return cls(user_id=None)


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer`` header value, if any."""

    if not authorization:
        return None
    prefix = "Bearer "
    if not authorization.startswith(prefix):
        return None
    token = authorization[len(prefix) :].strip()
    return token or None


def resolve_request_context(
    token: str | None,
    *,
    verifier: CredentialVerifier,
    users_repository: UsersRepository,
) -> RequestContext:
    """Resolve the acting user for a bearer token.

    Never raises: an invalid token, an unknown user or a failing user lookup
    all yield an anonymous context, and the authorization wrapper rejects it.
    """

    if not token:
        return RequestContext.anonymous()

    try:
        claims = verifier.validate_token(token)
    except AuthenticationFailedError as exc:
        logger.info("request_context_token_rejected reason=%s", exc.message)
        return RequestContext.anonymous()

    try:
        user = users_repository.get_user(claims.user_id)
    except Exception:
        logger.exception("request_context_user_lookup_failed user_id=%s", claims.user_id)
        return RequestContext.anonymous()

    if user is None:
        logger.info("request_context_user_missing user_id=%s", claims.user_id)
        return RequestContext.anonymous()

    return RequestContext(user_id=user.id)


def require_user_id(context: RequestContext) -> UUID:
    if context.user_id is None:
        raise AuthenticationFailedError("Authentication required")
    return context.user_id


def authenticated(
    operation: Callable[Concatenate[S, UUID, P], R],
) -> Callable[Concatenate[S, RequestContext, P], R]:
    """Wrap an operation body so it runs only for an authenticated context.

    The wrapped method is called as ``method(context, ...)``; the body receives
    the resolved user id in place of the context.
    """

    @wraps(operation)
    def wrapper(self: S, context: RequestContext, /, *args: P.args, **kwargs: P.kwargs) -> R:
        user_id = require_user_id(context)
        return operation(self, user_id, *args, **kwargs)

    return wrapper
