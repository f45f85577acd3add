"""Default structural parser and component tree builder.

Both are lightweight regex passes. Callers that need accurate results can
inject their own implementations through :class:`StructuralParser` and
:class:`ComponentTreeBuilder`.
"""

from __future__ import annotations

import posixpath
import re
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .models import FILE_TYPE_COMPONENT, FileInfo

_IMPORT_FROM = re.compile(
    r"""^\s*import\s+(?:type\s+)?(?P<clause>[\w*{}\s,$]+?)\s+from\s+["'](?P<source>[^"'\n]+)["']""",
    re.MULTILINE,
)
_IMPORT_BARE = re.compile(r"""^\s*import\s+["'](?P<source>[^"'\n]+)["']""", re.MULTILINE)
_REQUIRE = re.compile(r"""require\(\s*["'](?P<source>[^"'\n]+)["']\s*\)""")

_EXPORT_DEFAULT_NAMED = re.compile(
    r"^\s*export\s+default\s+(?:async\s+)?(?:function|class)\s+(?P<name>[A-Za-z_$][\w$]*)",
    re.MULTILINE,
)
_EXPORT_DEFAULT_IDENT = re.compile(
    r"^\s*export\s+default\s+(?P<name>[A-Za-z_$][\w$]*)\s*;?\s*$", re.MULTILINE
)
_EXPORT_DECL = re.compile(
    r"^\s*export\s+(?:async\s+)?(?:function|class|const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)",
    re.MULTILINE,
)
_EXPORT_LIST = re.compile(r"^\s*export\s*\{(?P<names>[^}]*)\}", re.MULTILINE)

_COMPONENT_DECL = re.compile(
    r"^\s*(?:export\s+(?:default\s+)?)?(?:function\s+(?P<fn>[A-Z][\w$]*)|(?:const|let)\s+(?P<var>[A-Z][\w$]*)\s*=)",
    re.MULTILINE,
)
_JSX_TAG = re.compile(r"<(?P<tag>[A-Za-z][\w.]*)[\s/>]")
_JSX_FRAGMENT = re.compile(r"<>|</>")

_RESOLVE_SUFFIXES = (
    "",
    ".jsx",
    ".js",
    ".tsx",
    ".ts",
    "/index.jsx",
    "/index.js",
    "/index.tsx",
    "/index.ts",
)


class StructuralParser(Protocol):
    """Extracts imports, exports and JSX usage from one file's text."""

    def __call__(self, content: str, path: str) -> Mapping[str, Any]:
        ...


class ComponentTreeBuilder(Protocol):
    """Turns the manifest file map into an inter-file dependency graph."""

    def __call__(self, files: Mapping[str, FileInfo]) -> Dict[str, Any]:
        ...


def parse_javascript_file(content: str, path: str) -> Dict[str, Any]:
    """Return structural facts about a JavaScript or TypeScript module."""
    imports: List[Dict[str, Any]] = []
    for match in _IMPORT_FROM.finditer(content):
        imports.append(_import_record(match.group("source"), match.group("clause")))
    for pattern in (_IMPORT_BARE, _REQUIRE):
        for match in pattern.finditer(content):
            imports.append(_import_record(match.group("source"), None))

    exports: List[str] = []
    default_match = _EXPORT_DEFAULT_NAMED.search(content) or _EXPORT_DEFAULT_IDENT.search(content)
    for match in _EXPORT_DECL.finditer(content):
        _append_unique(exports, match.group("name"))
    for match in _EXPORT_LIST.finditer(content):
        for raw in match.group("names").split(","):
            name = raw.strip().split(" as ")[-1].strip()
            if name:
                _append_unique(exports, name)
    if default_match:
        _append_unique(exports, "default")

    has_jsx = bool(_JSX_FRAGMENT.search(content)) or any(
        match.group("tag")[0].isupper() or match.group("tag") in _HTML_TAGS
        for match in _JSX_TAG.finditer(content)
    )

    components: List[str] = []
    if has_jsx:
        for match in _COMPONENT_DECL.finditer(content):
            _append_unique(components, match.group("fn") or match.group("var"))

    used = sorted(
        {
            match.group("tag")
            for match in _JSX_TAG.finditer(content)
            if match.group("tag")[0].isupper()
        }
    )

    result: Dict[str, Any] = {
        "imports": imports,
        "exports": exports,
        "components": components,
        "hasJSX": has_jsx,
        "usedComponents": used,
    }
    if has_jsx and components:
        result["type"] = FILE_TYPE_COMPONENT
    if default_match:
        result["defaultExport"] = default_match.group("name")
    return result


def build_component_tree(files: Mapping[str, FileInfo]) -> Dict[str, Any]:
    """Link each file to the local modules it imports and the ones importing it."""
    tree: Dict[str, Dict[str, Any]] = {
        path: {"file": path, "type": info.type, "imports": [], "importedBy": []}
        for path, info in files.items()
    }
    for path, info in files.items():
        for record in info.imports:
            source = record.get("source") if isinstance(record, dict) else record
            if not isinstance(source, str):
                continue
            target = resolve_import(path, source, files)
            if target is None or target == path:
                continue
            if target not in tree[path]["imports"]:
                tree[path]["imports"].append(target)
            if path not in tree[target]["importedBy"]:
                tree[target]["importedBy"].append(path)
    return tree


def resolve_import(importer: str, source: str, files: Mapping[str, Any]) -> Optional[str]:
    """Resolve a relative import specifier to a manifest path, if present."""
    if not source.startswith("."):
        return None
    base = posixpath.normpath(posixpath.join(posixpath.dirname(importer), source))
    for suffix in _RESOLVE_SUFFIXES:
        candidate = f"{base}{suffix}"
        if candidate in files:
            return candidate
    return None


def _import_record(source: str, clause: Optional[str]) -> Dict[str, Any]:
    default: Optional[str] = None
    named: List[str] = []
    if clause:
        clause = clause.strip()
        braces = re.search(r"\{([^}]*)\}", clause)
        if braces:
            for raw in braces.group(1).split(","):
                name = raw.strip().split(" as ")[-1].strip()
                if name:
                    named.append(name)
            clause = (clause[: braces.start()] + clause[braces.end() :]).strip()
        head = clause.strip().strip(",").strip()
        if head and not head.startswith("*"):
            default = head
        elif head.startswith("*") and " as " in head:
            named.append(head.split(" as ")[-1].strip())
    return {
        "source": source,
        "default": default,
        "named": named,
        "isLocal": source.startswith("."),
    }


def _append_unique(items: List[str], value: str) -> None:
    if value not in items:
        items.append(value)


_HTML_TAGS = frozenset(
    {
        "div", "span", "p", "a", "ul", "ol", "li", "img", "button", "input",
        "form", "label", "section", "header", "footer", "main", "nav", "h1",
        "h2", "h3", "h4", "table", "tr", "td", "th", "svg", "path", "select",
        "option", "textarea", "article", "aside",
    }
)


__all__ = [
    "ComponentTreeBuilder",
    "StructuralParser",
    "build_component_tree",
    "parse_javascript_file",
    "resolve_import",
]
