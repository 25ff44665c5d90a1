import logging
import re
from datetime import datetime, timezone
from typing import Optional

from beanie import PydanticObjectId
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, EmailStr
from pymongo.errors import DuplicateKeyError

from app.api.serializers import serialize
from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.security import ADMIN_ROLES, require_roles
from app.models.details import ChangeDetails
from app.models.enums import AuditAction, Role
from app.models.user import User
from app.services.audit import audit_user_action, on_user_created

logger = logging.getLogger(__name__)
router = APIRouter()

EDITABLE_FIELDS = ("name", "email", "role", "tradingview_username")


class UserCreateRequest(BaseModel):
    name: Optional[str] = None
    email: EmailStr
    role: Role = Role.USER
    tradingview_username: Optional[str] = None


class UserUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    tradingview_username: Optional[str] = None


def _snapshot(user: User, fields) -> dict:
    data = user.model_dump(mode="json", include=set(fields))
    return {k: data[k] for k in fields if k in data}


async def _load_user(user_id: PydanticObjectId) -> User:
    user = await User.get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    q: Optional[str] = None,
    role: Optional[Role] = None,
    admin: User = Depends(require_roles(*ADMIN_ROLES)),
):
    query = {}
    if q and q.strip():
        pattern = {"$regex": re.escape(q.strip()), "$options": "i"}
        query["$or"] = [{"name": pattern}, {"email": pattern}]
    if role:
        query["role"] = role.value

    skip = (page - 1) * limit
    users = await User.find(query).sort("-created_at").skip(skip).limit(limit).to_list()
    total = await User.find(query).count()
    return {
        "users": [serialize(u) for u in users],
        "totalCount": total,
        "hasMore": skip + len(users) < total,
        "currentPage": page,
    }


@router.post("/users", status_code=201)
async def create_user(body: UserCreateRequest, admin: User = Depends(require_roles(Role.ADMIN, Role.MANAGER))):
    user = User(**body.model_dump())
    try:
        await user.insert()
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    logger.info(f"[USERS] {admin.id} created user {user.id}")
    await audit_user_action(
        admin,
        AuditAction.CREATE_USER,
        str(user.id),
        ChangeDetails(new_values=_snapshot(user, EDITABLE_FIELDS)),
    )
    await on_user_created(user)
    return serialize(user)


@router.patch("/users/{user_id}")
async def update_user(
    user_id: PydanticObjectId,
    body: UserUpdateRequest,
    admin: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    user = await _load_user(user_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        return serialize(user)

    previous = _snapshot(user, changes.keys())
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = datetime.now(timezone.utc)
    try:
        await user.save()
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    await audit_user_action(
        admin,
        AuditAction.UPDATE_USER,
        str(user.id),
        ChangeDetails(previous_values=previous, new_values=_snapshot(user, changes.keys())),
    )
    if "role" in changes and previous.get("role") != user.role.value:
        await audit_user_action(
            admin,
            AuditAction.ROLE_CHANGE,
            str(user.id),
            ChangeDetails(previous_values={"role": previous.get("role")}, new_values={"role": user.role.value}),
        )
    return serialize(user)


@router.delete("/users/{user_id}")
async def delete_user(user_id: PydanticObjectId, admin: User = Depends(require_roles(Role.ADMIN))):
    user = await _load_user(user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="Admins cannot delete their own account")

    previous = _snapshot(user, EDITABLE_FIELDS)
    await user.delete()
    await audit_user_action(admin, AuditAction.DELETE_USER, str(user_id), ChangeDetails(previous_values=previous))
    return {"message": "User deleted successfully", "id": str(user_id)}
