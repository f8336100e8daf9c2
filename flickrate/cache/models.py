"""Data models for the photo detail cache."""

from datetime import datetime

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from flickrate.api.models import PhotoDetail


class CacheEntry(BaseModel):
    """A complete detail record and when it was fetched.

    An entry is either absent or complete; there is no partial form.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    photo_id: str = Field(min_length=1, description="Photo identifier")
    detail: PhotoDetail
    last_fetched: AwareDatetime

    @model_validator(mode="after")
    def _check_photo_id(self) -> "CacheEntry":
        if self.detail.id != self.photo_id:
            msg = f"Entry key {self.photo_id!r} does not match detail {self.detail.id!r}"
            raise ValueError(msg)
        return self

    @classmethod
    def from_detail(cls, detail: PhotoDetail, fetched_at: datetime) -> "CacheEntry":
        """Create an entry for a freshly fetched detail record.

        Args:
            detail: Complete detail record.
            fetched_at: When the fetch completed.

        Returns:
            CacheEntry keyed by the detail's photo id.
        """
        return cls(photo_id=detail.id, detail=detail, last_fetched=fetched_at)
