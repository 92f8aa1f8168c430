from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import ClassVar
import uuid
from datetime import datetime

from bookkeep.validators.book import NIL_GUID

# Book payload schema (create/update body); field rules live in bookkeep.validators
class BookPayload(BaseModel):
    guid: uuid.UUID = NIL_GUID
    title: str = ""
    author: str = ""
    isbn: str = ""
    description: str | None = None
    publication_year: int | None = None
    genre: str | None = None
    cover_image_url: str | None = None

    @field_validator("guid", mode="before")
    @classmethod
    def null_guid_is_nil(cls, v: object) -> object:
        # null reaches the rules as a missing Guid
        return NIL_GUID if v is None else v

    @field_validator("title", "author", "isbn", mode="before")
    @classmethod
    def null_text_is_empty(cls, v: object) -> object:
        return "" if v is None else v

    def with_cover(self, url: str | None) -> "BookPayload":
        """Copy of the payload carrying the given cover URL."""
        return self.model_copy(update={"cover_image_url": url})

# Book read schema
class BookRead(BaseModel):
    id: int
    guid: uuid.UUID
    title: str
    author: str
    isbn: str
    description: str | None = None
    publication_year: int | None = None
    genre: str | None = None
    cover_image_url: str | None = None
    created_on: datetime
    updated_on: datetime
    is_active: bool = Field(description="False once the book has been deleted")

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)
