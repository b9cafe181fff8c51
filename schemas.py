from __future__ import annotations
from typing import Optional, List

from pydantic import BaseModel, Field

class AuthRegister(BaseModel):
    username: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=200)

class AuthLogin(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=200)

class UserOut(BaseModel):
    id: str
    username: str
    created_at: int

class AuthOut(BaseModel):
    token: str
    user: UserOut

class ListName(BaseModel):
    name: str = Field(max_length=300)

class ListOut(BaseModel):
    id: str; name: str; is_default: bool; created_at: int

class TaskCreate(BaseModel):
    title: str

class TaskUpdate(BaseModel):
    title: Optional[str] = None
    is_completed: Optional[bool] = None
    is_important: Optional[bool] = None

class TaskOrder(BaseModel):
    id: str
    position: int

class ReorderPayload(BaseModel):
    taskOrders: List[TaskOrder]

class TaskOut(BaseModel):
    id: str; list_id: str; title: str
    is_completed: bool; is_important: bool; position: int
    created_at: int; updated_at: int; completed_at: Optional[int] = None
    list_name: Optional[str] = None

def to_user_out(r) -> UserOut:
    return UserOut(id=r["id"], username=r["username"], created_at=int(r["created_at"]))

def to_list_out(r) -> ListOut:
    return ListOut(id=r["id"], name=r["name"], is_default=bool(r["is_default"]), created_at=int(r["created_at"]))

def to_task_out(r) -> TaskOut:
    return TaskOut(
        id=r["id"], list_id=r["list_id"], title=r["title"],
        is_completed=bool(r["is_completed"]), is_important=bool(r["is_important"]),
        position=int(r["position"]),
        created_at=int(r["created_at"]), updated_at=int(r["updated_at"]),
        completed_at=(int(r["completed_at"]) if r["completed_at"] is not None else None),
        list_name=r.get("list_name"),
    )
