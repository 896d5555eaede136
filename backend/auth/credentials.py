"""Password hashing and bearer token primitives."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from backend.errors import AuthenticationFailedError
from shared import config
from shared.models import TokenClaims


@dataclass(slots=True)
class CredentialSettings:
    secret: str
    algorithm: str = "HS256"
    token_ttl: timedelta = timedelta(days=1)
    password_hash_method: str = "scrypt"

    @classmethod
    def from_env(cls) -> CredentialSettings:
        return cls(
            secret=config.jwt_secret(),
            algorithm=config.jwt_algorithm(),
            token_ttl=timedelta(seconds=config.token_ttl_seconds()),
            password_hash_method=config.password_hash_method(),
        )


class CredentialVerifier:
    """Hash/compare passwords and issue/validate signed bearer tokens."""

    def __init__(self, settings: CredentialSettings) -> None:
        self.settings = settings
        self._decoy_hash: str | None = None

    def hash_password(self, password: str) -> str:
        return generate_password_hash(password, method=self.settings.password_hash_method)

    def verify_password(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        return check_password_hash(password_hash, password)

    def verify_unknown_user_password(self, password: str) -> bool:
        """Spend one full hash comparison for a login with no matching account.

        Always returns False; keeps unknown-email logins as slow as wrong passwords.
        """

        if self._decoy_hash is None:
            self._decoy_hash = self.hash_password("decoy-password")
        check_password_hash(self._decoy_hash, password)
        return False

    def issue_token(
        self,
        *,
        user_id: UUID,
        email: str,
        ttl: timedelta | None = None,
        now: datetime | None = None,
    ) -> str:
        """Return a signed token for ``user_id`` that expires after ``ttl``."""

        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + (ttl if ttl is not None else self.settings.token_ttl)
        claims = {
            "sub": str(user_id),
            "id": str(user_id),
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, self.settings.secret, algorithm=self.settings.algorithm)

    def validate_token(self, token: str) -> TokenClaims:
        """Return token claims, or raise AuthenticationFailedError on any defect."""

        try:
            payload = jwt.decode(token, self.settings.secret, algorithms=[self.settings.algorithm])
        except ExpiredSignatureError as exc:
            raise AuthenticationFailedError("Token expired") from exc
        except JWTError as exc:
            raise AuthenticationFailedError("Invalid token") from exc

        raw_user_id = payload.get("sub") or payload.get("id")
        email = payload.get("email")
        expires_at = payload.get("exp")
        if not isinstance(raw_user_id, str) or not isinstance(email, str) or not isinstance(expires_at, int):
            raise AuthenticationFailedError("Invalid token")

        try:
            user_id = UUID(raw_user_id)
        except ValueError as exc:
            raise AuthenticationFailedError("Invalid token") from exc

        return TokenClaims(
            user_id=user_id,
            email=email,
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )
