from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from signflow.config import Config


class AuthService:
    """Bearer tokens are issued by the identity provider; the owner id is the ``sub`` claim."""

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Crea token JWT"""
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=Config.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, Config.SECRET_KEY, algorithm=Config.ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> Optional[str]:
        """Verifica token JWT y retorna el id del usuario"""
        try:
            payload = jwt.decode(token, Config.SECRET_KEY, algorithms=[Config.ALGORITHM])
        except JWTError:
            return None
        subject = payload.get("sub")
        if subject is None:
            return None
        return str(subject)
