# image_loader/core/security.py
"""
Security module for authentication.
Handles password hashing and creation/validation of the signed identity tokens.
"""
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext

from image_loader.core.errors import InvalidTokenError

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)
DEFAULT_TOKEN_TTL = dt.timedelta(hours=24)

def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)


class TokenCodec:
    """
    Issues and verifies signed identity tokens.

    A token asserts "the bearer is the identity with id X". The id travels as the
    decimal string in the ``iss`` claim, next to ``iat``/``nbf`` (issue time) and
    ``exp`` (issue time + ttl). Tokens are signed with a symmetric secret that is
    supplied by whoever constructs the codec.
    """

    def __init__(self, secret: str, ttl: dt.timedelta = DEFAULT_TOKEN_TTL, algorithm: str = JWT_ALG):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._algorithm = algorithm

    def issue(self, identity_id: int, now: dt.datetime | None = None) -> str:
        """
        Create a token for ``identity_id`` valid in the window [now, now + ttl].

        Args:
            identity_id: Positive identity id the token is bound to
            now: Issue time; defaults to the current UTC time

        Returns:
            Encoded JWT token string
        """
        if now is None:
            now = dt.datetime.now(dt.timezone.utc)
        payload = {
            "iss": str(identity_id),     # Identity id as decimal string
            "sub": "authorized",
            "iat": now,                  # Issued at timestamp
            "nbf": now,                  # Not valid before issue time
            "exp": now + self._ttl,      # Expiration timestamp
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> int:
        """
        Verify a token and return the identity id it was issued for.

        Raises:
            InvalidTokenError: If the signature does not match, the token is
                malformed, expired or not yet valid, or the issuer is not a
                positive integer. The message carries the reason.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["iss", "iat", "nbf", "exp"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc) or exc.__class__.__name__) from exc
        return _parse_issuer(payload.get("iss"))


def _parse_issuer(issuer) -> int:
    if isinstance(issuer, str) and issuer.isascii() and issuer.isdigit():
        identity_id = int(issuer)
        if identity_id > 0:
            return identity_id
    raise InvalidTokenError("issuer is not a valid identity id")
