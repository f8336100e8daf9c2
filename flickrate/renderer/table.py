"""Plain-text table of ranked photos."""

from collections.abc import Sequence
from datetime import datetime, tzinfo

from flickrate.ranking.models import RankedPhoto
from flickrate.renderer.constants import (
    COLUMN_GAP,
    DATE_FORMAT,
    ELLIPSIS,
    HEADERS,
    RIGHT_ALIGNED,
    TITLE_SUFFIX,
    TITLE_WIDTH,
)


def contract(text: str, total: int = TITLE_WIDTH, suffix: int = TITLE_SUFFIX) -> str:
    """Shorten text to ``total`` characters, keeping its head and tail.

    Args:
        text: Text to shorten.
        total: Maximum length of the result.
        suffix: Number of trailing characters to keep.

    Returns:
        The text unchanged if it fits, otherwise its leading characters,
        an ellipsis and its last ``suffix`` characters.
    """
    if len(text) <= total:
        return text
    head = max(total - suffix - len(ELLIPSIS), 0)
    tail = text[-suffix:] if suffix > 0 else ""
    return text[:head] + ELLIPSIS + tail


def _row(photo: RankedPhoto, tz: tzinfo | None) -> list[str]:
    posted = datetime.fromtimestamp(photo.detail.posted, tz=tz)
    return [
        posted.strftime(DATE_FORMAT),
        str(photo.views),
        str(photo.faves),
        f"{photo.rate_per_day:.1f}",
        contract(photo.detail.ref.title),
        photo.detail.info.page_url,
    ]


def render_table(photos: Sequence[RankedPhoto], tz: tzinfo | None = None) -> str:
    """Render selected photos as an aligned text table.

    Args:
        photos: Photos to list, in display order.
        tz: Time zone for the Date column (local time if None).

    Returns:
        Table text, ending with a "Selected N photos." footer line.
    """
    rows = [list(HEADERS), ["-" * 5 for _ in HEADERS]]
    rows.extend(_row(photo, tz) for photo in photos)

    widths = [max(len(row[col]) for row in rows) for col in range(len(HEADERS))]

    lines = []
    for row in rows:
        cells = [
            cell.rjust(width) if col in RIGHT_ALIGNED else cell.ljust(width)
            for col, (cell, width) in enumerate(zip(row, widths, strict=True))
        ]
        lines.append(COLUMN_GAP.join(cells).rstrip())

    lines.append(f"Selected {len(photos)} photos.")
    return "\n".join(lines) + "\n"
