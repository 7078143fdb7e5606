"""
Mots de passe (bcrypt) et jetons d'accès (JWT signé, sujet = ID utilisateur).
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from deals.auth.config import JWT_SECRET_KEY, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

# Seuls les jetons portant ce type ouvrent une session API
ACCESS_TOKEN_TYPE = "access"

def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Hash bcrypt illisible en base: {e}")
        return False

def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Émet un jeton d'accès pour l'utilisateur `user_id`."""
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "typ": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

def decode_access_token(token: str) -> Optional[int]:
    """ID utilisateur porté par un jeton d'accès valide, sinon None."""
    try:
        claims = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Jeton rejeté (signature, format ou expiration): {e}")
        return None

    if claims.get("typ") != ACCESS_TOKEN_TYPE:
        logger.warning(f"Jeton rejeté: type '{claims.get('typ')}' inattendu.")
        return None

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.isdigit():
        logger.warning(f"Jeton rejeté: sujet '{subject}' non numérique.")
        return None
    return int(subject)
