from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Category(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    description: Optional[str] = None
    slug: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: bool = True

    @field_validator("id", "parent_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)
