"""Security utilities: password hashing, JWT encoding."""

from datetime import datetime

import bcrypt
import jwt

# bcrypt only looks at the first 72 bytes; newer releases reject longer input
_BCRYPT_MAX_BYTES = 72


# --- Password Hashing ---

def _password_bytes(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode())
    except ValueError:
        # Not a bcrypt hash
        return False


# --- JWT Tokens ---

def encode_token(claims: dict, secret: str, algorithm: str, issued_at: datetime, expires_at: datetime) -> str:
    payload = {
        **claims,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str) -> dict:
    """Check signature and required claims. Expiry is left to the caller's clock.

    Raises jwt.PyJWTError on failure.
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        options={"verify_exp": False, "verify_iat": False, "require": ["sub", "exp", "iat"]},
    )
