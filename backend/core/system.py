"""
Top-level system configuration: database, server, admin UI, lists, session.

``system_config`` is what the application factory and the routes consume.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from infrastructure.config import Settings, get_settings

from .auth import AuthConfig, Session, StatelessSessions, create_auth, is_access_allowed, stateless_sessions
from .schema.lists import LISTS, ListConfig, validate_relationships


@dataclass(frozen=True)
class DatabaseConfig:
    provider: str
    url: str
    use_migrations: bool = True


@dataclass(frozen=True)
class ServerConfig:
    port: int
    host: str = "0.0.0.0"


@dataclass(frozen=True)
class UIConfig:
    is_access_allowed: Callable[[Optional[Session]], bool] = is_access_allowed
    is_disabled: bool = False


@dataclass(frozen=True)
class SystemConfig:
    db: DatabaseConfig
    server: ServerConfig
    lists: dict[str, ListConfig]
    ui: UIConfig = field(default_factory=UIConfig)
    session: Optional[StatelessSessions] = None
    auth: Optional[AuthConfig] = None


def config(
    db: DatabaseConfig,
    server: ServerConfig,
    lists: dict[str, ListConfig],
    ui: Optional[UIConfig] = None,
    session: Optional[StatelessSessions] = None,
) -> SystemConfig:
    """Validate list wiring and assemble the system configuration."""
    validate_relationships(lists)
    return SystemConfig(
        db=db,
        server=server,
        lists=lists,
        ui=ui or UIConfig(),
        session=session,
    )


def _provider_from_url(url: str) -> str:
    scheme = url.split(":", 1)[0]
    return scheme.split("+", 1)[0]


with_auth = create_auth(
    list_key="User",
    identity_field="email",
    secret_field="password",
    session_data="name created_at",
    init_first_item={"fields": ["name", "email", "password"]},
)


def build_system_config(settings: Optional[Settings] = None) -> SystemConfig:
    """Assemble the configuration from environment-driven settings."""
    settings = settings or get_settings()
    session = stateless_sessions(
        secret=settings.session_secret,
        max_age=settings.session_max_age,
        algorithm=settings.session_algorithm,
    )
    return with_auth(
        config(
            db=DatabaseConfig(
                provider=_provider_from_url(settings.database_url),
                url=settings.database_url,
                use_migrations=settings.use_migrations,
            ),
            server=ServerConfig(port=settings.port, host=settings.host),
            # Only people with session data may see the admin UI
            ui=UIConfig(is_access_allowed=is_access_allowed),
            lists=LISTS,
            session=session,
        )
    )


system_config = build_system_config()
