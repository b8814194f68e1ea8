from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class NoteUpdate(_Wire):
    title: str = Field(min_length=1)
    markdown: str = Field(min_length=1)
    pinned: bool = False
    tag_ids: list[str] = Field(default_factory=list, alias="tagIds")

    @field_validator("pinned", mode="before")
    @classmethod
    def _null_is_false(cls, v):
        return False if v is None else v

    @field_validator("tag_ids", mode="before")
    @classmethod
    def _null_is_empty(cls, v):
        return [] if v is None else v


class NoteCreate(NoteUpdate):
    id: str = Field(min_length=1)


class NoteOut(_Wire):
    id: str
    title: str
    markdown: str
    pinned: bool
    tag_ids: list[str] = Field(default_factory=list, alias="tagIds")


class TagCreate(_Wire):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)


class TagUpdate(_Wire):
    label: str = Field(min_length=1)


class TagOut(_Wire):
    id: str
    label: str


class Success(BaseModel):
    success: bool = True
