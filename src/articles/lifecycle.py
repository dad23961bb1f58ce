"""Article lifecycle rules.

Status moves freely between draft, published and archived. Saving an article
keeps two derived fields consistent:

* ``published_at`` is set exactly while the article is published. Entering
  published stamps the save time unless the caller already supplied a date;
  any other status clears it.
* ``reading_time`` follows the content (200 words per minute, at least one
  minute) and is recomputed whenever the content changes.
"""

import math
from datetime import datetime

WORDS_PER_MINUTE = 200

DRAFT = "draft"
PUBLISHED = "published"
ARCHIVED = "archived"


def reading_time(content: str | None) -> int:
    """Minutes needed to read ``content``."""
    words = len((content or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def apply(article, previous_content: str | None, now: datetime) -> None:
    """Bring derived fields in line before ``article`` is written.

    ``previous_content`` is the content last read from the database, ``None``
    for an unsaved article.
    """
    if article.status == PUBLISHED:
        if article.published_at is None:
            article.published_at = now
    else:
        article.published_at = None

    if previous_content is None or article.content != previous_content:
        article.reading_time = reading_time(article.content)


def status_changed(previous_status: str | None, new_status: str) -> bool:
    return previous_status != new_status


__all__ = [
    "ARCHIVED",
    "DRAFT",
    "PUBLISHED",
    "WORDS_PER_MINUTE",
    "apply",
    "reading_time",
    "status_changed",
]
