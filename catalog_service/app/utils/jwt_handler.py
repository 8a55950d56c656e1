from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel


class TokenData(BaseModel):
    """Identity and roles carried by an access token."""

    user_id: str
    roles: List[str] = []
    expires_at: datetime


class JWTHandler:
    """Encode and decode the access tokens issued by the user service."""

    def __init__(self, secret_key: str, algorithm: str):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def encode_token(
        self, payload: Dict[str, Any], expires_delta: Optional[timedelta] = None
    ) -> str:
        to_encode = payload.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
        to_encode.update({"exp": expire, "type": "access"})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenData:
        """Decode and validate a token. Raises ValueError when it is unusable."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ValueError("Token has expired")
        except JWTError as e:
            raise ValueError(f"Token validation failed: {e}")

        user_id = payload.get("user_id")
        exp = payload.get("exp")
        if not user_id or not exp:
            raise ValueError("Invalid token payload")

        roles = payload.get("roles") or []
        if not roles and payload.get("role"):
            roles = [payload["role"]]

        return TokenData(
            user_id=str(user_id),
            roles=[str(role).upper() for role in roles],
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
