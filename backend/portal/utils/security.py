import secrets
import string

import bcrypt

# Checked against when an admin email is unknown so both failure paths pay for a bcrypt round.
_DUMMY_PASSWORD_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt()).decode("utf-8")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt directly.

    bcrypt truncates at 72 *bytes* and this build raises if you exceed it,
    so enforce the limit explicitly.
    """
    if not password:
        raise ValueError("Password is required")

    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        raise ValueError("Password must be 72 bytes or less")

    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        # Burn the same work as a real comparison, then fail.
        _checkpw(password or "", _DUMMY_PASSWORD_HASH)
        return False
    if not password:
        return False
    return _checkpw(password, hashed)


def _checkpw(password: str, hashed: str) -> bool:
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def generate_numeric_code(length: int) -> str:
    """Uniform random digits from the OS CSPRNG (leading zeros allowed)."""
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)
