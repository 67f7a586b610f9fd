"""Product classification for canned-response selection.

The offline provider picks its templates from a small closed tag set
instead of scattering keyword checks through the stage agents.
"""

from __future__ import annotations

import re
from enum import Enum


class ProductTag(str, Enum):
    GENERIC = "generic"
    AUTOMOTIVE = "automotive"
    URL_SUPPLIED = "url_supplied"


_URL_RE = re.compile(r"https?://\S+|\bwww\.\S+\.\w{2,}", re.IGNORECASE)

_AUTOMOTIVE_RE = re.compile(
    r"\b(tesla|electric vehicles?|evs?|cars?|automotive|vehicles?|"
    r"charging stations?|self[- ]driving|autopilot|sedan|suv)\b",
    re.IGNORECASE,
)


def classify_product(text: str) -> ProductTag:
    """Tag free text describing a product.

    A URL wins over topic keywords: a link means the description is a
    pointer to a product page rather than the product itself.
    """
    if _URL_RE.search(text):
        return ProductTag.URL_SUPPLIED
    if _AUTOMOTIVE_RE.search(text):
        return ProductTag.AUTOMOTIVE
    return ProductTag.GENERIC
