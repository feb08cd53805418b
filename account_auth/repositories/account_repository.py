"""
Account repository implementation following the Repository pattern.
Each public method opens its own session and commits before returning, so no
partially written account is ever observable.
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import structlog

from ..core.exceptions import ConflictError, InfrastructureError, NotFoundError
from ..core.logging import mask_email
from ..interfaces.repository_interface import IAccountRepository
from ..models.account import Account, AccountRecord, CredentialRecord, Role
from ..models.base import utcnow

logger = structlog.get_logger()


class AccountRepository(IAccountRepository):
    """Repository for account data access operations."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_email(self, email: str) -> Optional[CredentialRecord]:
        try:
            async with self.session_factory() as db:
                account = await self._get_by_email(db, email)
                if not account:
                    return None
                return CredentialRecord(
                    account=account.to_record(),
                    password_hash=account.password_hash,
                )
        except SQLAlchemyError as e:
            logger.error("Failed to get account by email", error=str(e))
            raise InfrastructureError() from e

    async def find_by_id(self, account_id: str) -> Optional[AccountRecord]:
        try:
            async with self.session_factory() as db:
                query = select(Account).where(
                    Account.id == account_id,
                    Account.is_deleted == False,  # noqa: E712
                )
                result = await db.execute(query)
                account = result.scalar_one_or_none()
                return account.to_record() if account else None
        except SQLAlchemyError as e:
            logger.error("Failed to get account by id", account_id=account_id, error=str(e))
            raise InfrastructureError() from e

    async def create(
        self,
        email: str,
        password_hash: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Role = Role.USER,
    ) -> AccountRecord:
        """
        Insert the account and let the unique email index arbitrate races.

        Two concurrent inserts for one email both reach the database; the
        loser gets an IntegrityError which surfaces as ConflictError.
        """
        try:
            async with self.session_factory() as db:
                account = Account(
                    email=email,
                    password_hash=password_hash,
                    first_name=first_name,
                    last_name=last_name,
                    role=role,
                    is_verified=False,
                )
                db.add(account)
                try:
                    await db.commit()
                except IntegrityError as e:
                    await db.rollback()
                    logger.info("Account creation rejected, email taken", email=mask_email(email))
                    raise ConflictError() from e
                await db.refresh(account)

                logger.info("Account created successfully", account_id=account.id)
                return account.to_record()
        except ConflictError:
            raise
        except SQLAlchemyError as e:
            logger.error("Account creation failed", error=str(e))
            raise InfrastructureError() from e

    async def update_password(self, email: str, password_hash: str) -> None:
        try:
            async with self.session_factory() as db:
                account = await self._get_by_email(db, email)
                if not account:
                    raise NotFoundError()
                account.password_hash = password_hash
                await db.commit()
                logger.info("Account password updated", account_id=account.id)
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Password update failed", error=str(e))
            raise InfrastructureError() from e

    async def mark_verified(self, email: str) -> AccountRecord:
        try:
            async with self.session_factory() as db:
                account = await self._get_by_email(db, email)
                if not account:
                    raise NotFoundError()
                # is_verified only ever moves false -> true; keep the first timestamp.
                if not account.is_verified:
                    account.is_verified = True
                    account.verified_at = utcnow()
                    await db.commit()
                    await db.refresh(account)
                    logger.info("Account marked verified", account_id=account.id)
                return account.to_record()
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Verification update failed", error=str(e))
            raise InfrastructureError() from e

    async def _get_by_email(self, db: AsyncSession, email: str) -> Optional[Account]:
        query = select(Account).where(
            Account.email == email,
            Account.is_deleted == False,  # noqa: E712
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()
