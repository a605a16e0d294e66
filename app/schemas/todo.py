from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StrictBool, StringConstraints
from pydantic.alias_generators import to_camel

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TodoCreate(CamelModel):
    title: Title


class TodoUpdate(CamelModel):
    completed: StrictBool


class TodoOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    completed: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime


class TodoPage(CamelModel):
    todos: list[TodoOut]
    current_page: int
    total_pages: int
