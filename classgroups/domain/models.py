from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class ClassDTO(BaseModel):
    id: str
    name: str
    max_groups: int
    min_group_size: int
    max_group_size: int
    created_at: datetime
    groups_created: bool = False
    admin_token: Optional[str] = None
    is_admin: bool = False
    member_count: int = 0
    group_count: int = 0


class MemberDTO(BaseModel):
    id: str
    class_id: str
    name: str
    location: str
    sector: str
    notes: Optional[str] = None
    created_at: datetime
    group_id: Optional[str] = None
    group_name: Optional[str] = None


class GroupDTO(BaseModel):
    id: str
    class_id: str
    name: str
    position: int
    created_at: datetime
    members: List[MemberDTO] = Field(default_factory=list)


class CreatedClassDTO(BaseModel):
    class_id: str
    admin_token: str
    admin_url: str
