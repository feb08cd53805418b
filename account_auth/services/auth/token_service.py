"""
Token service focused solely on signing and verifying session tokens.
Stateless: the only shared value is the immutable signing key.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from jose import ExpiredSignatureError, JWTError, jwt
import structlog

from ...core.exceptions import UnauthenticatedError
from ...models.account import AccountRecord

logger = structlog.get_logger()

REQUIRED_CLAIMS = ("sub", "email", "role", "isVerified", "iat", "exp")


@dataclass(frozen=True)
class TokenClaims:
    """Decoded claim set shared by access and refresh tokens."""

    sub: str
    email: str
    role: str
    is_verified: bool
    iat: int
    exp: int

    @classmethod
    def for_account(cls, account: AccountRecord) -> Dict[str, Any]:
        """Identity claims for ``account``; iat/exp are added at issuance."""
        return {
            "sub": account.id,
            "email": account.email,
            "role": account.role.value,
            "isVerified": account.is_verified,
        }

    def to_payload(self) -> Dict[str, Any]:
        return {
            "sub": self.sub,
            "email": self.email,
            "role": self.role,
            "isVerified": self.is_verified,
            "iat": self.iat,
            "exp": self.exp,
        }


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Service responsible for JWT token operations."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_ttl: timedelta = timedelta(minutes=15),
        refresh_token_ttl: timedelta = timedelta(days=7),
    ):
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl

    def issue(self, claims: Dict[str, Any], ttl: timedelta) -> str:
        """
        Sign ``claims`` with issue and expiry times.

        Args:
            claims: Identity claims (sub, email, role, isVerified)
            ttl: Lifetime of the token

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        to_encode = dict(claims)
        to_encode.update({
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        })
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def issue_pair(self, claims: Dict[str, Any]) -> TokenPair:
        """Access and refresh tokens over the same payload, expiring independently."""
        return TokenPair(
            access_token=self.issue(claims, self.access_token_ttl),
            refresh_token=self.issue(claims, self.refresh_token_ttl),
        )

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            UnauthenticatedError: On bad signature, expiry, malformed input or
                missing claims
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.debug("Token expired")
            raise UnauthenticatedError("Token expired")
        except JWTError as e:
            logger.debug("Token validation failed", error=str(e))
            raise UnauthenticatedError("Could not validate credentials")

        missing = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
        if missing:
            logger.debug("Token missing claims", missing=missing)
            raise UnauthenticatedError("Could not validate credentials")

        try:
            return TokenClaims(
                sub=str(payload["sub"]),
                email=str(payload["email"]),
                role=str(payload["role"]),
                is_verified=bool(payload["isVerified"]),
                iat=int(payload["iat"]),
                exp=int(payload["exp"]),
            )
        except (TypeError, ValueError):
            raise UnauthenticatedError("Could not validate credentials")
