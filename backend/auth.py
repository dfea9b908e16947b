"""
Aether Intel - Token verification

Access tokens are HS256 JWTs issued by the external auth service and signed
with the shared SECRET_KEY. The ``sub`` claim is the user id.
"""

import os
import secrets
import logging
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_hex(32))
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 15


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """Create JWT access token (used by tests and local tooling)."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Decoded payload, or None when the token is invalid, expired or has no subject."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.debug(f"Token verification failed: {e}")
        return None
    if not payload.get("sub"):
        logger.debug("Token verification failed: missing sub claim")
        return None
    return payload
