"""
Credential store interface.
Defines the contract for account persistence so the authentication service
can be wired against any implementation.
"""

from typing import Optional, Protocol, runtime_checkable

from ..models.account import AccountRecord, CredentialRecord, Role


@runtime_checkable
class IAccountRepository(Protocol):
    """Protocol for account persistence. Every method is one atomic operation."""

    async def find_by_email(self, email: str) -> Optional[CredentialRecord]:
        """
        Look up an account and its password hash by email.

        Args:
            email: Account email (case-sensitive)

        Returns:
            Credential record or None if no live account has this email
        """
        ...

    async def find_by_id(self, account_id: str) -> Optional[AccountRecord]:
        """
        Look up an account by id.

        Args:
            account_id: Account identifier

        Returns:
            Account record or None if not found
        """
        ...

    async def create(
        self,
        email: str,
        password_hash: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Role = Role.USER,
    ) -> AccountRecord:
        """
        Create an unverified account.

        Raises:
            ConflictError: If the email is already taken
        """
        ...

    async def update_password(self, email: str, password_hash: str) -> None:
        """
        Overwrite the stored password hash.

        Raises:
            NotFoundError: If no account has this email
        """
        ...

    async def mark_verified(self, email: str) -> AccountRecord:
        """
        Set is_verified and verified_at together.

        Raises:
            NotFoundError: If no account has this email
        """
        ...
