"""File manifest assembly for sandbox projects."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Mapping

from .commands import CommandRunner
from .config import ScanConfig
from .discovery import FileDiscovery
from .logging import get_logger
from .models import (
    FILE_TYPE_STYLE,
    FileInfo,
    FileManifest,
    ManifestResult,
    Retrieved,
    Skipped,
    now_ms,
)
from .parsing import (
    ComponentTreeBuilder,
    StructuralParser,
    build_component_tree,
    parse_javascript_file,
)
from .routes import PatternRouteExtractor, RouteExtractor

_SCRIPT_FILE = re.compile(r"\.(jsx?|tsx?)$")

PRIMARY_ENTRY_POINTS = ("src/main.jsx", "src/index.jsx")
FALLBACK_ENTRY_POINTS = ("src/App.jsx", "App.jsx")


class ManifestAssembler:
    """Classifies retrieved files and aggregates them into a FileManifest."""

    def __init__(
        self,
        parser: StructuralParser = parse_javascript_file,
        tree_builder: ComponentTreeBuilder = build_component_tree,
        route_extractor: RouteExtractor | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._parser = parser
        self._tree_builder = tree_builder
        self._route_extractor = route_extractor or PatternRouteExtractor()
        self._clock = clock

    def assemble(self, contents: Mapping[str, str]) -> FileManifest:
        """Build a manifest from ``{relative_path: content}`` pairs."""
        manifest = FileManifest(timestamp=self._clock())

        for relative_path, content in contents.items():
            full_path = f"/{relative_path}"
            info = FileInfo(
                content=content,
                path=full_path,
                relative_path=relative_path,
                last_modified=self._clock(),
            )

            if _SCRIPT_FILE.search(relative_path):
                info.merge(self._parser(content, full_path))

                if relative_path in PRIMARY_ENTRY_POINTS:
                    manifest.entry_point = full_path
                if relative_path in FALLBACK_ENTRY_POINTS:
                    manifest.entry_point = manifest.entry_point or full_path

            if relative_path.endswith(".css"):
                manifest.style_files.append(full_path)
                info.type = FILE_TYPE_STYLE

            manifest.files[full_path] = info

        manifest.component_tree = self._tree_builder(manifest.files)
        manifest.routes = self._route_extractor.extract(manifest.files)
        return manifest


class ManifestBuilder:
    """Runs discovery, retrieval and assembly against one sandbox."""

    def __init__(
        self,
        runner: CommandRunner,
        config: ScanConfig | None = None,
        assembler: ManifestAssembler | None = None,
    ) -> None:
        self.config = config or ScanConfig()
        self.discovery = FileDiscovery(runner, self.config)
        self.assembler = assembler or ManifestAssembler()
        self.logger = get_logger("manifest")

    def build(self) -> ManifestResult:
        self.logger.info("Fetching and analyzing file structure...")
        paths = self.discovery.discover()

        contents: Dict[str, str] = {}
        skipped: List[Skipped] = []
        for outcome in self.discovery.retrieve(paths):
            if isinstance(outcome, Retrieved):
                contents[outcome.relative_path] = outcome.content
            else:
                skipped.append(outcome)
        if skipped:
            self.logger.debug("Skipped %d of %d files", len(skipped), len(paths))

        structure = self.discovery.directory_structure()
        manifest = self.assembler.assemble(contents)
        self.logger.info(
            "Manifest built with %d files, %d routes, entry point %s",
            len(manifest.files),
            len(manifest.routes),
            manifest.entry_point or "(none)",
        )
        return ManifestResult(
            manifest=manifest,
            files=contents,
            structure=structure,
            skipped=skipped,
        )


__all__ = [
    "FALLBACK_ENTRY_POINTS",
    "ManifestAssembler",
    "ManifestBuilder",
    "PRIMARY_ENTRY_POINTS",
]
