"""Privacy helpers — keep personal data out of log lines."""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"([a-zA-Z0-9_.+-])[a-zA-Z0-9_.+-]*@([a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+)")


def mask_email(text: str) -> str:
    """``joao.santos@techcorp.com`` -> ``j***@techcorp.com``."""
    return _EMAIL_RE.sub(r"\1***@\2", text)


def redact_query(query: str, query_type: str) -> str:
    """Company names are never logged; emails are masked."""
    if query_type == "company":
        return "[COMPANY_NAME]"
    return mask_email(query)
