"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel, Field

from destiny_start.models import (
    Background,
    CamelModel,
    CharacterConfig,
    DestinedOne,
    Equipment,
    Item,
    Resolution,
    Skill,
)


class NewDraftBody(BaseModel):
    name: str = ""


class LastUsedBody(BaseModel):
    name: str | None = None


class ImportBody(BaseModel):
    content: str
    resolutions: dict[str, Resolution] = Field(default_factory=dict)


class SyncBody(CamelModel):
    character: CharacterConfig
    items: list[Item] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    destined_ones: list[DestinedOne] = Field(default_factory=list)
    message_id: str | None = None


class PromptBody(CamelModel):
    character: CharacterConfig
    equipments: list[Equipment] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    destined_ones: list[DestinedOne] = Field(default_factory=list)
    background: Background | None = None
