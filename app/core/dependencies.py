from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.jwt_config import decode_token, get_token_from_cookie
from app.services.user_service import get_user_by_id
from app.services.membership import is_active_member
from app.core.exceptions import AuthorizationError

async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)):
    token = get_token_from_cookie(request=request)
    payload = decode_token(token)
    user_id = payload.get("sub")

    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")

    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Could not validate credentials")

    user = await get_user_by_id(db, user_id)

    if user is None:
        raise HTTPException(status_code=401, detail="User not found")

    return user

async def check_group_membership(db: AsyncSession, group_id: int, user_id: int):
    if not await is_active_member(db, group_id, user_id):
        raise AuthorizationError("You are not a member of this group", field="group_id")
