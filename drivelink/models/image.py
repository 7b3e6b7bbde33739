"""Image reference model."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Field names the content store has used for an image URL, in lookup order
URL_FIELDS = ("raw_url", "url", "imageUrl", "projectImageUrl", "image")


class ImageReference(BaseModel):
    """A user-supplied image URL taken from a content record."""

    model_config = ConfigDict(frozen=True)

    raw_url: str = Field(..., description="URL exactly as the user saved it")
    owner: Optional[str] = Field(None, description="Content record the URL belongs to")
    caption: Optional[str] = None

    @field_validator("raw_url")
    @classmethod
    def validate_raw_url(cls, v: str) -> str:
        """Strip surrounding whitespace; reject blank URLs."""
        v = v.strip()
        if not v:
            raise ValueError("Image URL cannot be empty")
        return v

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ImageReference":
        """Build a reference from a content-store record.

        Raises:
            ValueError: If the record has no recognised URL field
        """
        for key in URL_FIELDS:
            value = record.get(key)
            if isinstance(value, str) and value.strip():
                return cls(
                    raw_url=value,
                    owner=record.get("id") or record.get("title"),
                    caption=record.get("caption"),
                )
        raise ValueError(f"Record has no image URL field ({', '.join(URL_FIELDS)})")
