from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


# Enums
class TaskItemStatus(str, Enum):
    Todo = "Todo"
    InProgress = "InProgress"
    Done = "Done"


# Models
class TaskItem(BaseModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    status: TaskItemStatus = TaskItemStatus.Todo
    project_id: int  # parent project; owner is inherited from it


class Project(BaseModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    user_id: str  # owning user (the "username" claim)
    tasks: List[TaskItem] = Field(default_factory=list)
