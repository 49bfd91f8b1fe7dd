from datetime import datetime

from jose import JWTError, jwt

from ..config import SECRET_KEY

ALGORITHM = "HS256"
CANDIDATE_TOKEN_KIND = "candidate"


def create_candidate_token(*, user_id: str, token_id: str, issued_at: datetime, expires_at: datetime) -> str:
    claims = {
        "sub": user_id,
        "kind": CANDIDATE_TOKEN_KIND,
        "jti": token_id,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_candidate_token(token: str) -> dict | None:
    """Return verified claims, or None for anything that isn't a live candidate token."""
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if claims.get("kind") != CANDIDATE_TOKEN_KIND or not claims.get("sub") or not claims.get("jti"):
        return None
    return claims
