"""
Password authentication and stateless sessions.

``create_auth`` describes which list holds the identities and which of its
fields are the identity and the secret. The returned ``with_auth`` augments
a system configuration with that description; the API layer reads it to
mount the sign-in routes and to resolve sessions.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Optional

from .security.tokens import TokenPayload, TokenService

if TYPE_CHECKING:
    from .system import SystemConfig

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """An authenticated session as seen by access-control predicates."""

    item_id: str
    list_key: str
    data: dict = field(default_factory=dict)


class StatelessSessions:
    """Sessions carried entirely in a signed token; nothing is stored server-side."""

    def __init__(self, secret: str, max_age: int, algorithm: str = "HS256"):
        self.max_age = max_age
        self._tokens = TokenService(
            secret_key=secret,
            algorithm=algorithm,
            max_age_seconds=max_age,
        )

    def start(self, item_id: str, list_key: str, data: dict | None = None) -> str:
        """Issue a token for an authenticated item, embedding its session data."""
        return self._tokens.create_session_token(item_id, list_key, data=data)

    def get(self, token: str | None) -> Optional[TokenPayload]:
        """Decode a token, returning None when missing, tampered with or expired."""
        if not token:
            return None
        return self._tokens.decode_token(token)


def stateless_sessions(secret: str, max_age: int, algorithm: str = "HS256") -> StatelessSessions:
    return StatelessSessions(secret=secret, max_age=max_age, algorithm=algorithm)


@dataclass(frozen=True)
class AuthConfig:
    """Which list authenticates and how."""

    list_key: str
    identity_field: str
    secret_field: str
    session_data: tuple[str, ...]
    init_first_item_fields: tuple[str, ...] = ()

    @property
    def allows_init_first_item(self) -> bool:
        return bool(self.init_first_item_fields)

    def describe(self) -> dict:
        return {
            "list_key": self.list_key,
            "identity_field": self.identity_field,
            "secret_field": self.secret_field,
            "session_data": list(self.session_data),
            "init_first_item": {"fields": list(self.init_first_item_fields)},
        }


def _parse_session_data(session_data: str | list[str]) -> tuple[str, ...]:
    if isinstance(session_data, str):
        return tuple(session_data.split())
    return tuple(session_data)


def create_auth(
    list_key: str = "User",
    identity_field: str = "email",
    secret_field: str = "password",
    session_data: str | list[str] = "name created_at",
    init_first_item: Optional[dict] = None,
) -> Callable[["SystemConfig"], "SystemConfig"]:
    """
    Build a ``with_auth`` wrapper for a system configuration.

    Args:
        list_key: List whose items can sign in.
        identity_field: Field used to look the item up (unique text field).
        secret_field: Password field checked at sign-in.
        session_data: Space separated field names exposed as session data.
        init_first_item: ``{"fields": [...]}``; when set, the first item can be
            created through the sign-in flow while the list is still empty.

    Returns:
        A function adding the auth configuration to a ``SystemConfig``.
    """
    auth = AuthConfig(
        list_key=list_key,
        identity_field=identity_field,
        secret_field=secret_field,
        session_data=_parse_session_data(session_data),
        init_first_item_fields=tuple((init_first_item or {}).get("fields", ())),
    )

    def with_auth(system: "SystemConfig") -> "SystemConfig":
        if system.session is None:
            raise ValueError("with_auth requires a session strategy on the configuration")
        lists = system.lists
        if auth.list_key not in lists:
            raise ValueError(f"with_auth: unknown list '{auth.list_key}'")
        fields = lists[auth.list_key].fields
        identity = fields.get(auth.identity_field)
        if identity is None or identity.kind != "text":
            raise ValueError(f"with_auth: '{auth.identity_field}' must be a text field")
        if not identity.is_unique:
            raise ValueError(f"with_auth: identity field '{auth.identity_field}' must be unique")
        secret = fields.get(auth.secret_field)
        if secret is None or secret.kind != "password":
            raise ValueError(f"with_auth: '{auth.secret_field}' must be a password field")
        for name in auth.init_first_item_fields:
            if name not in fields:
                raise ValueError(f"with_auth: init_first_item field '{name}' is not a field")

        logger.debug("Auth enabled on list %s (identity=%s)", auth.list_key, auth.identity_field)
        return replace(system, auth=auth)

    return with_auth


def is_access_allowed(session: Optional[Session]) -> bool:
    """Admin UI access: anyone whose session carries data."""
    return bool(session is not None and session.data)


def session_data_from_item(item: Any, fields: tuple[str, ...]) -> dict:
    """Pick the configured session data fields off an authenticated item."""
    data = {"id": str(item.id)}
    for name in fields:
        value = getattr(item, name, None)
        data[name] = value.isoformat() if hasattr(value, "isoformat") else value
    return data
