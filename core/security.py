# core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import secrets

from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from core.config import settings


# ========================================
# 🔑 JWT / APP CONFIG
# ========================================
ALGORITHM = settings.ALGORITHM or "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/authentication/sign-in")


# ========================================
# 🔐 Password Hashing (Argon2)
# ========================================
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password using Argon2."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password using Argon2. Identities without a password never match."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ========================================
# 🔑 Signer
# ========================================
def sign(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign claims into an opaque, time-bounded credential."""
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_signature(token: str) -> Optional[Dict[str, Any]]:
    """Return the signed claims, or None when the signature or expiry is invalid."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


# ========================================
# 📧 Invitation Tokens
# ========================================
def generate_invitation_token() -> str:
    """Generate secure random token for invite links."""
    return secrets.token_urlsafe(32)
