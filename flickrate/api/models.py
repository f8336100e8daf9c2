"""Data models for photo records returned by the REST API."""

from pydantic import BaseModel, ConfigDict, Field

from flickrate.api.constants import URL_TYPE_PHOTOPAGE


class LoginIdentity(BaseModel):
    """The user an access token belongs to."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str
    username: str = ""


class PhotoRef(BaseModel):
    """A photo as listed by flickr.photos.search."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Photo identifier")
    owner: str = ""
    secret: str = ""
    server: str = ""
    farm: str = ""
    title: str = ""
    is_public: bool = False
    is_friend: bool = False
    is_family: bool = False


class PhotoUrl(BaseModel):
    """A typed URL attached to a photo."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: str
    value: str


class PhotoInfo(BaseModel):
    """Popularity and date fields from flickr.photos.getInfo.

    Dates are Unix timestamps except ``taken``, which Flickr reports as a
    local date-time string.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    secret: str = ""
    views: int = Field(default=0, ge=0)
    posted: int = 0
    taken: str = ""
    taken_granularity: int = 0
    last_update: int = 0
    urls: tuple[PhotoUrl, ...] = ()

    @property
    def page_url(self) -> str:
        """Get the photo page URL, falling back to the first URL."""
        for url in self.urls:
            if url.type == URL_TYPE_PHOTOPAGE:
                return url.value
        return self.urls[0].value if self.urls else ""


class PhotoDetail(BaseModel):
    """Full detail record for one photo.

    Always carries the search reference, the getInfo fields and the
    favorites total; a record is never built from a partial fetch.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ref: PhotoRef
    info: PhotoInfo
    favorites: int = Field(default=0, ge=0)

    @property
    def id(self) -> str:
        """Get the photo identifier."""
        return self.ref.id

    @property
    def views(self) -> int:
        """Get the view count."""
        return self.info.views

    @property
    def posted(self) -> int:
        """Get the posted timestamp."""
        return self.info.posted
