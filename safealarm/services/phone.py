"""Phone number normalization for SMS destinations."""

import re

from safealarm.config import settings

_STRIP_RE = re.compile(r"[\s\-()]")


def normalize_phone(raw: str, default_country_code: str | None = None) -> str:
    """Convert a user-entered phone string into a dialable form.

    Whitespace, dashes and parentheses are removed. Numbers already starting
    with ``+`` pass through; a bare 10-digit number gets the default country
    code; anything else gets a bare ``+``. Digit counts are not validated
    further, so short input still yields a plausible-looking destination.
    """
    if default_country_code is None:
        default_country_code = settings.default_country_code

    clean = _STRIP_RE.sub("", raw)
    if clean.startswith("+"):
        return clean
    if len(clean) == 10:
        return f"{default_country_code}{clean}"
    return f"+{clean}"
