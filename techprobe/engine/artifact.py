import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

from bs4 import BeautifulSoup

_SET_COOKIE_NAME_RE = re.compile(r"(?:^|[,\n])\s*([^=;,\s]+)=")
_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_DESCRIPTION_RE = re.compile(
    r"<meta[^>]*name=['\"]description['\"][^>]*content=['\"](.*?)['\"]", re.IGNORECASE
)


class HeaderMap(Mapping):
    """Read-only, case-insensitive view over response headers."""

    def __init__(self, headers: Optional[Mapping] = None):
        self._data: Dict[str, str] = {}
        for key, value in (headers or {}).items():
            self._data[str(key).lower()] = "" if value is None else str(value)

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __contains__(self, key) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"HeaderMap({self._data!r})"


def cookie_names_from_header(set_cookie: str) -> FrozenSet[str]:
    """Pull cookie names out of a (possibly comma-joined) Set-Cookie value."""
    if not set_cookie:
        return frozenset()
    return frozenset(_SET_COOKIE_NAME_RE.findall(set_cookie))


@dataclass(frozen=True)
class PageArtifact:
    """Normalized bundle of one fetched page. Built once, never mutated."""
    html: str = ""
    headers: HeaderMap = field(default_factory=HeaderMap)
    script_sources: Tuple[str, ...] = ()
    stylesheet_hrefs: Tuple[str, ...] = ()
    cookie_names: FrozenSet[str] = frozenset()
    url: Optional[str] = None

    @classmethod
    def from_response(
        cls,
        html: Optional[str],
        headers: Optional[Mapping] = None,
        url: Optional[str] = None,
        cookie_names: Optional[Iterable[str]] = None,
    ) -> "PageArtifact":
        """Build an artifact from raw response materials.

        Script and stylesheet URLs are extracted from the markup in
        document order. Cookie names fall back to the ``set-cookie`` header.
        """
        html = html or ""
        header_map = headers if isinstance(headers, HeaderMap) else HeaderMap(headers)
        scripts, styles = _extract_resource_urls(html)

        if cookie_names is None:
            names = cookie_names_from_header(header_map.get("set-cookie", ""))
        else:
            names = frozenset(cookie_names)

        return cls(
            html=html,
            headers=header_map,
            script_sources=scripts,
            stylesheet_hrefs=styles,
            cookie_names=names,
            url=url,
        )


def _extract_resource_urls(html: str) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    if not html.strip():
        return (), ()

    soup = BeautifulSoup(html, "lxml")
    scripts = tuple(
        tag["src"].strip() for tag in soup.find_all("script", src=True) if tag["src"].strip()
    )
    styles = []
    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "stylesheet" in [r.lower() for r in rel] and link["href"].strip():
            styles.append(link["href"].strip())
    return scripts, tuple(styles)


def page_metadata(html: str) -> Dict[str, Optional[str]]:
    """Title and meta description of a page, if present."""
    html = html or ""
    title = _TITLE_RE.search(html)
    description = _DESCRIPTION_RE.search(html)
    return {
        "title": title.group(1).strip() if title else None,
        "description": description.group(1).strip() if description else None,
    }
