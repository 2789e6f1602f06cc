# classgroups/api/routers/members.py
"""
Member endpoints: register, list with group assignment, autocomplete values.
"""
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from classgroups.infrastructure.db.session import get_async_session as get_db
from classgroups.services import class_service

router = APIRouter()


class RegisterMemberRequest(BaseModel):
    name: Any = None
    location: Any = None
    sector: Any = None
    notes: Any = None

    model_config = ConfigDict(extra="allow")


@router.post("/{class_id}/members", status_code=status.HTTP_201_CREATED, summary="Register a member")
async def register_member(class_id: str, req: RegisterMemberRequest, db: AsyncSession = Depends(get_db)):
    member_id = await class_service.register_member(db, class_id, req.model_dump())
    return {"member_id": member_id, "success": True}


@router.get("/{class_id}/members", summary="List members with their groups")
async def list_members(class_id: str, db: AsyncSession = Depends(get_db)):
    members = await class_service.list_members(db, class_id)
    return {"members": [m.model_dump() for m in members], "total_count": len(members)}


@router.get("/{class_id}/members/autocomplete", summary="Known sectors and locations")
async def autocomplete(class_id: str, db: AsyncSession = Depends(get_db)):
    return await class_service.autocomplete(db, class_id)
