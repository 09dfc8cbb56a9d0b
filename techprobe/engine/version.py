import re
from typing import Optional

VERSION_RE = re.compile(r"\d+\.\d+(?:\.\d+)?")


def extract_version(value: Optional[str]) -> Optional[str]:
    """Best-effort numeric version from a header value or meta content.

    >>> extract_version("PHP/8.1.2")
    '8.1.2'
    >>> extract_version("nginx") is None
    True
    """
    if not value:
        return None
    match = VERSION_RE.search(value)
    return match.group(0) if match else None
