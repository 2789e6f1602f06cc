# classgroups/api/routers/classes.py
"""
Class endpoints: create a class, get class details.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from classgroups.infrastructure.db.session import get_async_session as get_db
from classgroups.services import class_service

router = APIRouter()


# Permissive: type problems are reported by the validators, not as 422s
class CreateClassRequest(BaseModel):
    name: Any = None
    max_groups: Any = None
    min_group_size: Any = None
    max_group_size: Any = None

    model_config = ConfigDict(extra="allow")


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a class")
async def create_class(req: CreateClassRequest, db: AsyncSession = Depends(get_db)):
    created = await class_service.create_class(db, req.model_dump())
    return created.model_dump()


@router.get("/{class_id}", summary="Get class details")
async def get_class(
    class_id: str,
    x_admin_token: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    details = await class_service.get_class(db, class_id, x_admin_token)
    return {"class": details.model_dump(exclude_none=not details.is_admin)}
