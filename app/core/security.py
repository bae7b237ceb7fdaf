# app/core/security.py
from dataclasses import dataclass, field
from typing import FrozenSet

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import JWT_ALGORITHM, SECRET_KEY
from app.db.base import get_db
from app.db.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """The caller: who they are and which of their roles this session acts as."""
    id: int
    role: str
    roles: FrozenSet[str] = field(default_factory=frozenset)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token subject")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    roles = frozenset(user.active_roles)
    role = payload.get("role") or "client"
    if role not in roles:
        raise HTTPException(status_code=403, detail=f"Role '{role}' is not active for this user")

    return CurrentUser(id=user.id, role=role, roles=roles)

