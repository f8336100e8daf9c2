"""Typed parameter sets for each remote API operation."""

from typing import Annotated, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from flickrate.api.constants import FAVORITES_PER_PAGE, SAFE_SEARCH_ALL


class ApiOperation(BaseModel):
    """Base class for REST operations.

    Subclasses fix ``api_method`` and contribute their own parameters.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_method: ClassVar[str] = ""

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters (excluding method, key and format)."""
        return {}


class CheckLogin(ApiOperation):
    """flickr.test.login: identify the authorized user."""

    api_method: ClassVar[str] = "flickr.test.login"


class FindByUsername(ApiOperation):
    """flickr.people.findByUsername: resolve a user name to an NSID."""

    api_method: ClassVar[str] = "flickr.people.findByUsername"

    username: Annotated[str, Field(min_length=1)]

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters."""
        return {"username": self.username}


class SearchPhotos(ApiOperation):
    """flickr.photos.search: one page of a user's photos."""

    api_method: ClassVar[str] = "flickr.photos.search"

    user_id: Annotated[str, Field(min_length=1)]
    page: Annotated[int, Field(ge=1)] = 1
    safe_search: Annotated[int, Field(ge=1, le=3)] = SAFE_SEARCH_ALL

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters."""
        return {
            "user_id": self.user_id,
            "safe_search": str(self.safe_search),
            "page": str(self.page),
        }


class GetInfo(ApiOperation):
    """flickr.photos.getInfo: views, dates and URLs of a photo."""

    api_method: ClassVar[str] = "flickr.photos.getInfo"

    photo_id: Annotated[str, Field(min_length=1)]

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters."""
        return {"photo_id": self.photo_id}


class GetFavorites(ApiOperation):
    """flickr.photos.getFavorites: favorite count of a photo."""

    api_method: ClassVar[str] = "flickr.photos.getFavorites"

    photo_id: Annotated[str, Field(min_length=1)]
    per_page: Annotated[int, Field(ge=1)] = FAVORITES_PER_PAGE

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters."""
        return {"photo_id": self.photo_id, "per_page": str(self.per_page)}
