"""Parsing of Flickr REST (XML) responses."""

from typing import TypeVar
from xml.etree.ElementTree import Element, ParseError

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException
from pydantic import BaseModel, ValidationError

from flickrate.api.constants import STAT_OK
from flickrate.api.models import LoginIdentity, PhotoInfo, PhotoRef, PhotoUrl
from flickrate.errors import ProtocolError


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_response(body: bytes) -> Element:
    """Parse a response envelope and check its status.

    Args:
        body: Raw response body.

    Returns:
        The ``<rsp>`` root element.

    Raises:
        ProtocolError: If the body is not XML or reports ``stat="fail"``.
    """
    try:
        root = DefusedET.fromstring(body)
    except (ParseError, DefusedXmlException) as e:
        msg = f"Malformed API response: {e}"
        raise ProtocolError(msg) from e

    stat = root.get("stat", "")
    if stat != STAT_OK:
        err = root.find("err")
        code = err.get("code") if err is not None else None
        message = err.get("msg", "") if err is not None else ""
        status = stat or "missing stat"
        msg = f"{status}: {message}" if message else status
        raise ProtocolError(msg, error_code=code)

    return root


def _build(model: type[ModelT], **fields: object) -> ModelT:
    try:
        return model(**fields)
    except ValidationError as e:
        msg = f"Unexpected {model.__name__} in API response: {e}"
        raise ProtocolError(msg) from e


def _require(root: Element, tag: str) -> Element:
    element = root.find(tag)
    if element is None:
        msg = f"API response has no <{tag}> element"
        raise ProtocolError(msg)
    return element


def _int(element: Element | None, attr: str) -> int:
    if element is None:
        return 0
    raw = element.get(attr, "")
    try:
        return int(raw) if raw else 0
    except ValueError as e:
        msg = f"Attribute {attr}={raw!r} is not an integer"
        raise ProtocolError(msg) from e


def _flag(element: Element, attr: str) -> bool:
    return element.get(attr, "0") == "1"


def parse_login(root: Element) -> LoginIdentity:
    """Parse a flickr.test.login response."""
    user = _require(root, "user")
    return _build(
        LoginIdentity,
        user_id=user.get("id", ""),
        username=user.findtext("username", default=""),
    )


def parse_user_nsid(root: Element) -> str:
    """Parse a flickr.people.findByUsername response.

    Returns:
        The user's NSID.
    """
    user = _require(root, "user")
    nsid = user.get("nsid") or user.get("id", "")
    if not nsid:
        msg = "User lookup returned no NSID"
        raise ProtocolError(msg)
    return nsid


def parse_photo_page(root: Element) -> tuple[list[PhotoRef], int, int]:
    """Parse one page of a flickr.photos.search response.

    Returns:
        Tuple of (photos, page number, total pages).
    """
    photos = _require(root, "photos")
    refs = [
        _build(
            PhotoRef,
            id=photo.get("id", ""),
            owner=photo.get("owner", ""),
            secret=photo.get("secret", ""),
            server=photo.get("server", ""),
            farm=photo.get("farm", ""),
            title=photo.get("title", ""),
            is_public=_flag(photo, "ispublic"),
            is_friend=_flag(photo, "isfriend"),
            is_family=_flag(photo, "isfamily"),
        )
        for photo in photos.findall("photo")
    ]
    return refs, _int(photos, "page"), _int(photos, "pages")


def parse_photo_info(root: Element) -> PhotoInfo:
    """Parse a flickr.photos.getInfo response."""
    photo = _require(root, "photo")
    dates = photo.find("dates")
    urls = tuple(
        _build(PhotoUrl, type=url.get("type", ""), value=(url.text or "").strip())
        for url in photo.findall("urls/url")
    )
    return _build(
        PhotoInfo,
        id=photo.get("id", ""),
        secret=photo.get("secret", ""),
        views=_int(photo, "views"),
        posted=_int(dates, "posted"),
        taken=dates.get("taken", "") if dates is not None else "",
        taken_granularity=_int(dates, "takengranularity"),
        last_update=_int(dates, "lastupdate"),
        urls=urls,
    )


def parse_favorites_total(root: Element) -> int:
    """Parse the favorite total from a flickr.photos.getFavorites response."""
    return _int(_require(root, "photo"), "total")
