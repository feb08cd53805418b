"""
Authentication service: registration, email verification, login, password
reset and token refresh.

The service owns no state of its own. Uniqueness of emails is the credential
store's job, expiry of codes is the code store's job, and delivery of codes is
handed to the notification dispatcher without waiting for it.
"""

from typing import Any, Dict, Optional
import structlog

from ...core.context import RequestContext
from ...core.exceptions import (
    InvalidOrExpiredCodeError,
    UnauthenticatedError,
)
from ...core.logging import mask_email
from ...core.security import SecurityService, dummy_password_hash
from ...interfaces.code_store_interface import ICodeStore
from ...interfaces.notifier_interface import INotificationDispatcher, NotificationKind
from ...interfaces.repository_interface import IAccountRepository
from ...models.account import AccountRecord, Role
from ...stores.code_store import CodePurpose, code_key
from .token_service import TokenClaims, TokenService

logger = structlog.get_logger()

REGISTERED_MESSAGE = "User registered. Please check email for OTP."
EMAIL_VERIFIED_MESSAGE = "Email verified successfully"
RESET_REQUESTED_MESSAGE = "If email exists, OTP sent"
PASSWORD_RESET_MESSAGE = "Password reset successfully"

_NOTIFICATION_KIND = {
    CodePurpose.EMAIL_VERIFICATION: NotificationKind.EMAIL_VERIFICATION,
    CodePurpose.PASSWORD_RESET: NotificationKind.PASSWORD_RESET,
}


class AuthenticationService:
    """Service responsible for the account authentication flows."""

    def __init__(
        self,
        account_repository: IAccountRepository,
        code_store: ICodeStore,
        notification_dispatcher: INotificationDispatcher,
        token_service: TokenService,
        code_ttl_seconds: int = 300,
    ):
        self.account_repository = account_repository
        self.code_store = code_store
        self.notification_dispatcher = notification_dispatcher
        self.token_service = token_service
        self.code_ttl_seconds = code_ttl_seconds

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Create an unverified account and send it a verification code.

        The acknowledgement is the same whether or not the email goes out.

        Raises:
            ConflictError: If an account with ``email`` already exists
        """
        password_hash = await SecurityService.hash_password_async(password)

        account = await self.account_repository.create(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=Role.USER,
        )

        await self._issue_code(CodePurpose.EMAIL_VERIFICATION, account.email)

        logger.info("Account registered", account_id=account.id)
        return {"message": REGISTERED_MESSAGE}

    async def verify_email(self, email: str, code: str) -> Dict[str, str]:
        """
        Consume an email verification code.

        A code that never existed and one that was already used fail the same
        way; callers cannot tell them apart. The code is spent before the
        account is touched, so it is gone even if the account has vanished.

        Raises:
            InvalidOrExpiredCodeError: If no live code matches
            NotFoundError: If the code matched but the account is gone
        """
        await self._consume_code(CodePurpose.EMAIL_VERIFICATION, email, code)

        account = await self.account_repository.mark_verified(email)

        logger.info("Email verified successfully", account_id=account.id)
        return {"message": EMAIL_VERIFIED_MESSAGE}

    async def validate_credentials(self, email: str, password: str) -> AccountRecord:
        """
        Check an email/password pair.

        Returns:
            The account without secret fields

        Raises:
            UnauthenticatedError: For an unknown email or a wrong password alike
        """
        credential = await self.account_repository.find_by_email(email)

        if credential is None:
            # Spend the same bcrypt work as a real check.
            await SecurityService.verify_password_async(password, dummy_password_hash())
            logger.info("Login failed", email=mask_email(email))
            raise UnauthenticatedError("Invalid credentials")

        if not await SecurityService.verify_password_async(password, credential.password_hash):
            logger.info("Login failed", email=mask_email(email))
            raise UnauthenticatedError("Invalid credentials")

        return credential.account

    async def login(self, account: AccountRecord) -> Dict[str, Any]:
        """
        Issue an access/refresh pair for a verified account.

        Raises:
            UnauthenticatedError: If the account's email is not verified
        """
        if not account.is_verified:
            raise UnauthenticatedError("Email not verified")

        tokens = self.token_service.issue_pair(TokenClaims.for_account(account))

        logger.info("Tokens issued", account_id=account.id)
        return {
            "access_token": tokens.access_token,
            "refresh_token": tokens.refresh_token,
            "user": account.public_profile(),
        }

    async def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        """Credential check followed by login."""
        account = await self.validate_credentials(email, password)
        return await self.login(account)

    async def forgot_password(self, email: str) -> Dict[str, str]:
        """
        Send a password reset code if the account exists.

        The response never reveals whether it does.
        """
        credential = await self.account_repository.find_by_email(email)
        if credential is not None:
            await self._issue_code(CodePurpose.PASSWORD_RESET, email)
            logger.info("Password reset initiated", account_id=credential.account.id)
        else:
            logger.info("Password reset requested for unknown email", email=mask_email(email))

        return {"message": RESET_REQUESTED_MESSAGE}

    async def reset_password(self, email: str, code: str, new_password: str) -> Dict[str, str]:
        """
        Consume a reset code and replace the password hash.

        Of several concurrent resets presenting the same code only one gets
        past the consume.

        Raises:
            InvalidOrExpiredCodeError: If no live code matches
            NotFoundError: If the code matched but the account is gone
        """
        await self._consume_code(CodePurpose.PASSWORD_RESET, email, code)

        password_hash = await SecurityService.hash_password_async(new_password)
        await self.account_repository.update_password(email, password_hash)

        logger.info("Password reset completed successfully", email=mask_email(email))
        return {"message": PASSWORD_RESET_MESSAGE}

    async def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        """
        Exchange a refresh token for a new pair.

        The account is re-read so a deleted account cannot refresh. The old
        refresh token stays valid until its own expiry.

        Raises:
            UnauthenticatedError: If the token does not verify or its subject is gone
        """
        try:
            claims = self.token_service.verify(refresh_token)
        except UnauthenticatedError:
            raise UnauthenticatedError("Invalid refresh token")

        account = await self.account_repository.find_by_id(claims.sub)
        if account is None:
            logger.info("Refresh rejected, account not found", account_id=claims.sub)
            raise UnauthenticatedError("Invalid refresh token")

        return await self.login(account)

    def authenticate_access_token(self, ctx: RequestContext, token: str) -> Dict[str, Any]:
        """
        Verify a bearer token and attach its claims to the request context.

        Raises:
            UnauthenticatedError: If the token does not verify
        """
        claims = self.token_service.verify(token)
        identity = claims.to_payload()
        ctx.attach_identity(identity)
        return identity

    def current_identity(self, ctx: RequestContext) -> Dict[str, Any]:
        """
        Identity attached to ``ctx`` by bearer authentication.

        Raises:
            UnauthenticatedError: If the request was not authenticated
        """
        if ctx.identity is None:
            raise UnauthenticatedError("Authentication required")
        return ctx.identity

    async def _issue_code(self, purpose: CodePurpose, email: str) -> None:
        """Store a fresh code (replacing any earlier one) and queue its delivery."""
        code = SecurityService.generate_otp()
        await self.code_store.set(code_key(purpose, email), code, self.code_ttl_seconds)
        self.notification_dispatcher.submit(email, _NOTIFICATION_KIND[purpose], code)

    async def _consume_code(self, purpose: CodePurpose, email: str, code: str) -> None:
        if not await self.code_store.consume(code_key(purpose, email), code):
            logger.info("Code rejected", purpose=purpose.value, email=mask_email(email))
            raise InvalidOrExpiredCodeError()
