# classgroups/api/routers/groups.py
"""
Group endpoints: run automatic grouping, list groups, manual create/update/delete.
Everything except listing needs the class admin token.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from classgroups.infrastructure.db.session import get_async_session as get_db
from classgroups.services import class_service

router = APIRouter()


class CreateGroupRequest(BaseModel):
    name: Any = None
    member_ids: Any = None

    model_config = ConfigDict(extra="allow")


class UpdateGroupsRequest(BaseModel):
    groups: Any = None

    model_config = ConfigDict(extra="allow")


@router.get("/{class_id}/groups", summary="List groups with members")
async def list_groups(class_id: str, db: AsyncSession = Depends(get_db)):
    groups = await class_service.list_groups(db, class_id)
    return {"groups": [g.model_dump() for g in groups]}


@router.post("/{class_id}/groups/auto", status_code=status.HTTP_201_CREATED, summary="Run automatic grouping")
async def auto_create_groups(
    class_id: str,
    x_admin_token: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    groups = await class_service.auto_create_groups(db, class_id, x_admin_token)
    return {"groups": [g.model_dump() for g in groups], "success": True}


@router.post("/{class_id}/groups", status_code=status.HTTP_201_CREATED, summary="Create a group by hand")
async def create_group(
    class_id: str,
    req: CreateGroupRequest,
    x_admin_token: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    group = await class_service.create_manual_group(db, class_id, x_admin_token, req.model_dump())
    return {
        "success": True,
        "group": {"id": group.id, "name": group.name, "position": group.position},
    }


@router.put("/{class_id}/groups", summary="Rename, reorder and reassign groups")
async def update_groups(
    class_id: str,
    req: UpdateGroupsRequest,
    x_admin_token: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    await class_service.update_groups(db, class_id, x_admin_token, req.model_dump())
    return {"success": True, "message": "Groups updated successfully"}


@router.delete("/{class_id}/groups/{group_id}", summary="Delete a group")
async def delete_group(
    class_id: str,
    group_id: str,
    x_admin_token: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    await class_service.delete_group(db, class_id, x_admin_token, group_id)
    return {"success": True, "message": "Group deleted successfully"}
