"""Registration and login."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from backend.auth.credentials import CredentialVerifier
from backend.errors import AuthenticationFailedError, DuplicateEmailError
from backend.repositories.users_repository import UsersRepository
from shared.models import AuthResult, LoginRequest, RegisterRequest, UserProfile, UserRecord


logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(slots=True)
class AuthService:
    users_repository: UsersRepository
    verifier: CredentialVerifier

    def _auth_result(self, user: UserRecord) -> AuthResult:
        token = self.verifier.issue_token(user_id=user.id, email=user.email)
        return AuthResult(token=token, user=UserProfile.from_record(user))

    def register(self, request: RegisterRequest) -> AuthResult:
        if self.users_repository.get_user_by_email(request.email) is not None:
            raise DuplicateEmailError("Email already registered")

        user = self.users_repository.create_user(
            name=request.name,
            email=request.email,
            password_hash=self.verifier.hash_password(request.password),
        )
        logger.info("user_registered user_id=%s", user.id)
        return self._auth_result(user)

    def login(self, request: LoginRequest) -> AuthResult:
        user = self.users_repository.get_user_by_email(request.email)
        if user is None:
            self.verifier.verify_unknown_user_password(request.password)
            logger.info("login_failed reason=unknown_email")
            raise AuthenticationFailedError(_INVALID_CREDENTIALS)
        if not self.verifier.verify_password(request.password, user.password_hash):
            logger.info("login_failed reason=bad_password user_id=%s", user.id)
            raise AuthenticationFailedError(_INVALID_CREDENTIALS)
        return self._auth_result(user)
