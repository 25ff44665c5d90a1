import logging
from typing import Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Depends, Header, HTTPException
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from app.core.config import SECRET_KEY, SESSION_MAX_AGE, SESSION_SALT
from app.models.enums import Role
from app.models.user import User

logger = logging.getLogger(__name__)

# Sessions are issued by the auth service; this side only verifies them.
serializer = URLSafeTimedSerializer(SECRET_KEY, salt=SESSION_SALT)


def issue_session_token(user_id: str, role: Role) -> str:
    return serializer.dumps({"user_id": str(user_id), "role": role.value})


def read_session_token(token: str) -> Optional[dict]:
    """Return the session payload, or None if the token is expired or forged."""
    try:
        return serializer.loads(token, max_age=SESSION_MAX_AGE)
    except SignatureExpired:
        logger.warning("[AUTH] Expired session token received")
        return None
    except BadSignature:
        logger.warning("[AUTH] Invalid session token received")
        return None


async def get_current_user(authorization: Optional[str] = Header(None)) -> User:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    payload = read_session_token(authorization[7:].strip())
    if not payload or "user_id" not in payload:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        user = await User.get(PydanticObjectId(payload["user_id"]))
    except InvalidId:
        user = None
    if not user:
        logger.warning(f"[AUTH] Session references unknown user {payload['user_id']}")
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def require_roles(*roles: Role):
    """Dependency factory restricting an endpoint to the given roles."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user

    return checker


ADMIN_ROLES = (Role.ADMIN, Role.MANAGER, Role.SUPPORT)
