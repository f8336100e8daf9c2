"""Flickr REST API access.

Typed operations, XML response parsing and a client that signs calls with
the access credential when one is available.
"""

from flickrate.api.client import FlickrClient
from flickrate.api.constants import REST_ENDPOINT
from flickrate.api.metrics import ApiMetrics
from flickrate.api.models import (
    LoginIdentity,
    PhotoDetail,
    PhotoInfo,
    PhotoRef,
    PhotoUrl,
)
from flickrate.api.operations import (
    ApiOperation,
    CheckLogin,
    FindByUsername,
    GetFavorites,
    GetInfo,
    SearchPhotos,
)


__all__ = [
    "REST_ENDPOINT",
    "ApiMetrics",
    "ApiOperation",
    "CheckLogin",
    "FindByUsername",
    "FlickrClient",
    "GetFavorites",
    "GetInfo",
    "LoginIdentity",
    "PhotoDetail",
    "PhotoInfo",
    "PhotoRef",
    "PhotoUrl",
    "SearchPhotos",
]
