import asyncio
import hmac
import secrets
from functools import lru_cache
from passlib.context import CryptContext
import structlog

logger = structlog.get_logger()

# Cost factor is fixed; it is not read from configuration.
BCRYPT_ROUNDS = 12

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)

OTP_MIN = 100000
OTP_MAX = 999999


class SecurityService:
    """Handles password hashing and one-time code primitives"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Generate password hash with a fresh random salt"""
        return pwd_context.hash(password)

    @staticmethod
    async def hash_password_async(password: str) -> str:
        return await asyncio.to_thread(SecurityService.get_password_hash, password)

    @staticmethod
    async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(
            SecurityService.verify_password, plain_password, hashed_password
        )

    @staticmethod
    def generate_otp() -> str:
        """Six-digit numeric code drawn from the OS CSPRNG"""
        return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

    @staticmethod
    def codes_match(stored: str, supplied: str) -> bool:
        """Constant-time comparison of a stored and a supplied code"""
        return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


@lru_cache()
def dummy_password_hash() -> str:
    """Hash verified against when no account exists, so both failure paths cost one bcrypt check."""
    return SecurityService.get_password_hash(secrets.token_urlsafe(16))
