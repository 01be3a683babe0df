from __future__ import annotations

import re
from typing import Sequence

from .config import DEFAULT_LINK_HOST

_NEWLINE_RE = re.compile(r"\r\n|\n|\r")


def build_shopping_list_link(shopping_list: str | Sequence[str], host: str = DEFAULT_LINK_HOST) -> str:
    """Encode a shopping list into the fragment of a shareable URL.

    Only spaces, slashes and line breaks are escaped; commas and every other
    character are left as-is so browsers keep them readable.
    """
    if not isinstance(shopping_list, str):
        shopping_list = "\n".join(shopping_list)
    encoded = shopping_list.replace(" ", "%20").replace("/", "%2F")
    return f"https://{host}/#" + _NEWLINE_RE.sub("%0A", encoded)
