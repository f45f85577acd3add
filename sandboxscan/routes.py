"""Best-effort route detection over manifest file contents.

Two conventions are recognised: declarative React Router elements and
filesystem routing under ``pages/``. This is plain text matching, not a
JSX parse, so multi-line attributes and nested braces are missed.
"""

from __future__ import annotations

import re
from typing import List, Mapping, Optional, Protocol

from .models import FileInfo, RouteInfo

_ROUTER_MARKERS = ("<Route", "createBrowserRouter")
_ROUTE_ATTRIBUTE = re.compile(
    r"""path=["']([^"']+)["'].*(?:element|component)=\{([^}]+)\}"""
)
_PAGES_PREFIX = re.compile(r"^(src/)?pages/")
_SCRIPT_SUFFIX = re.compile(r"\.(jsx?|tsx?)$")
_INDEX_SUFFIX = re.compile(r"index$")


class RouteExtractor(Protocol):
    """Contract for passes that derive a route table from manifest files."""

    def extract(self, files: Mapping[str, FileInfo]) -> List[RouteInfo]:
        ...


class PatternRouteExtractor:
    """Detects routes with the router-element and pages-directory heuristics."""

    def extract(self, files: Mapping[str, FileInfo]) -> List[RouteInfo]:
        routes: List[RouteInfo] = []
        for path, info in files.items():
            routes.extend(self._router_routes(path, info))
            page_route = page_route_path(info.relative_path)
            if page_route is not None:
                routes.append(RouteInfo(path=page_route, component=path))
        return routes

    def _router_routes(self, path: str, info: FileInfo) -> List[RouteInfo]:
        content = info.content
        if not any(marker in content for marker in _ROUTER_MARKERS):
            return []
        return [
            RouteInfo(path=match.group(1), component=path)
            for match in _ROUTE_ATTRIBUTE.finditer(content)
        ]


def page_route_path(relative_path: str) -> Optional[str]:
    """Map a ``pages/`` file to its route, e.g. ``src/pages/about.jsx`` -> ``/about``.

    ``pages/index.jsx`` maps to ``/`` and ``pages/blog/index.jsx`` to ``/blog/``.
    Returns ``None`` for files outside a pages directory.
    """
    if not (relative_path.startswith("pages/") or relative_path.startswith("src/pages/")):
        return None
    route = _PAGES_PREFIX.sub("", relative_path, count=1)
    route = _SCRIPT_SUFFIX.sub("", route, count=1)
    route = _INDEX_SUFFIX.sub("", route, count=1)
    return "/" + route


def extract_routes(
    files: Mapping[str, FileInfo], extractor: RouteExtractor | None = None
) -> List[RouteInfo]:
    """Run ``extractor`` (the pattern heuristic by default) over ``files``."""
    return (extractor or PatternRouteExtractor()).extract(files)


__all__ = ["PatternRouteExtractor", "RouteExtractor", "extract_routes", "page_route_path"]
