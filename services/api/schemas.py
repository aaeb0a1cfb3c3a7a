from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.materials.models import MaterialRecord


class MaterialOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topic: str
    title: str = ""
    description: str = ""
    attachment_url: str | None = Field(None, alias="attachmentUrl")
    attachment_name: str | None = Field(None, alias="attachmentName")

    @classmethod
    def from_record(cls, record: MaterialRecord) -> "MaterialOut":
        return cls(
            topic=record.topic,
            title=record.title,
            description=record.description,
            attachment_url=record.attachment_url,
            attachment_name=record.attachment_name,
        )


class UploadResponse(BaseModel):
    message: str = "File uploaded successfully!"
    url: str


class ErrorMessage(BaseModel):
    message: str


class TopicNotFound(BaseModel):
    error: str = "Topic not found"
