"""
Signed session tokens for stateless sessions.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

SESSION_TOKEN_TYPE = "session"


@dataclass
class TokenPayload:
    """Decoded session token."""

    sub: str  # item id
    list_key: str
    exp: datetime
    iat: datetime
    type: str = SESSION_TOKEN_TYPE
    data: dict = field(default_factory=dict)


class TokenService:
    """Creates and validates signed session tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        max_age_seconds: int = 60 * 60 * 24 * 30,
    ):
        """
        Args:
            secret_key: Secret used to sign tokens
            algorithm: JWT algorithm (default: HS256)
            max_age_seconds: Lifetime of a session token
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.max_age_seconds = max_age_seconds

    def create_session_token(self, item_id: str, list_key: str, data: dict | None = None) -> str:
        """
        Create a session token for an authenticated item.

        Args:
            item_id: Id of the authenticated item
            list_key: List the item belongs to ("User")
            data: Extra session data embedded in the token

        Returns:
            Encoded JWT
        """
        now = datetime.now(UTC)
        payload = {
            "sub": item_id,
            "list_key": list_key,
            "exp": now + timedelta(seconds=self.max_age_seconds),
            "iat": now,
            "type": SESSION_TOKEN_TYPE,
        }
        if data:
            payload["data"] = data
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenPayload | None:
        """
        Decode and validate a session token.

        Returns:
            TokenPayload if valid, None if invalid, expired or of another type
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError:
            return None

        for required in ("sub", "exp", "list_key", "type"):
            if required not in payload:
                return None
        if payload["type"] != SESSION_TOKEN_TYPE:
            return None

        return TokenPayload(
            sub=payload["sub"],
            list_key=payload["list_key"],
            exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
            iat=datetime.fromtimestamp(payload.get("iat", 0), tz=UTC),
            type=payload["type"],
            data=payload.get("data") or {},
        )
