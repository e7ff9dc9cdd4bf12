"""Auth resolver: maps an incoming request to an authenticated user id.

Sessions are owned by an external identity provider. The default resolver
trusts the ``X-User-Id`` header stamped by the upstream session gateway, or a
``Bearer <user id>`` token, and never validates credentials itself.
"""

from abc import ABC, abstractmethod

from fastapi import Request

from ordering.errors import Unauthorized


class AuthResolver(ABC):
    """Abstract auth resolver interface."""

    @abstractmethod
    def resolve(self, request: Request) -> str | None:
        """Return the resolved user id, or None when unauthenticated."""
        ...


class HeaderAuthResolver(AuthResolver):
    header_name = "X-User-Id"

    def resolve(self, request: Request) -> str | None:
        user_id = request.headers.get(self.header_name, "")
        if not user_id:
            authorization = request.headers.get("Authorization", "")
            scheme, _, token = authorization.partition(" ")
            if scheme.lower() == "bearer":
                user_id = token
        return user_id.strip() or None


_current_resolver: AuthResolver | None = None


def get_auth_resolver() -> AuthResolver:
    """Return the current auth resolver. Defaults to HeaderAuthResolver."""
    global _current_resolver
    if _current_resolver is None:
        _current_resolver = HeaderAuthResolver()
    return _current_resolver


def set_auth_resolver(resolver: AuthResolver) -> None:
    """Override the active auth resolver (useful for tests)."""
    global _current_resolver
    _current_resolver = resolver


def reset_auth_resolver() -> None:
    global _current_resolver
    _current_resolver = None


def resolve_user(request: Request) -> str | None:
    """FastAPI dependency: the caller's user id, or None."""
    return get_auth_resolver().resolve(request)


def require_user(user_id: str | None) -> str:
    if not user_id:
        raise Unauthorized({"user": ["Sign in to continue"]})
    return user_id
