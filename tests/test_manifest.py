"""Tests for manifest assembly."""

from __future__ import annotations

from typing import Any, Dict, List

from sandboxscan.commands import CommandRunner
from sandboxscan.manifest import ManifestAssembler, ManifestBuilder
from sandboxscan.models import FILE_TYPE_STYLE, FILE_TYPE_UTILITY, RouteInfo
from tests._fixtures.sandbox import FakeSandbox, SandboxSDKError


def _assembler(**kwargs: Any) -> ManifestAssembler:
    return ManifestAssembler(clock=lambda: 1_700_000_000_000, **kwargs)


def test_entry_point_prefers_main_over_app_in_either_order() -> None:
    for order in (["src/App.jsx", "src/main.jsx"], ["src/main.jsx", "src/App.jsx"]):
        manifest = _assembler().assemble({path: "export default 1" for path in order})
        assert manifest.entry_point == "/src/main.jsx"


def test_entry_point_falls_back_to_app() -> None:
    manifest = _assembler().assemble({"App.jsx": "", "src/util.js": ""})
    assert manifest.entry_point == "/App.jsx"


def test_entry_point_detection_is_path_literal() -> None:
    manifest = _assembler().assemble({"web/src/main.jsx": "", "src/main.tsx": ""})
    assert manifest.entry_point == ""


def test_style_files_match_style_typed_files() -> None:
    manifest = _assembler().assemble(
        {
            "src/index.css": "body { margin: 0 }",
            "src/App.jsx": "export default function App() { return <div /> }",
            "src/theme/colors.css": ":root {}",
            "package.json": "{}",
        }
    )

    styled = [path for path, info in manifest.files.items() if info.type == FILE_TYPE_STYLE]
    assert manifest.style_files == styled == ["/src/index.css", "/src/theme/colors.css"]
    assert all(path.endswith(".css") for path in manifest.style_files)
    assert manifest.files["/package.json"].type == FILE_TYPE_UTILITY


def test_only_script_files_reach_the_parser() -> None:
    seen: List[str] = []

    def parser(content: str, path: str) -> Dict[str, Any]:
        seen.append(path)
        return {"type": "component", "exports": ["default"], "custom": 1}

    manifest = _assembler(parser=parser).assemble(
        {"a.jsx": "", "b.ts": "", "c.css": "", "d.json": "{}"}
    )

    assert seen == ["/a.jsx", "/b.ts"]
    assert manifest.files["/a.jsx"].type == "component"
    assert manifest.files["/a.jsx"].exports == ["default"]
    assert manifest.files["/a.jsx"].metadata == {"custom": 1}
    assert manifest.files["/c.css"].type == FILE_TYPE_STYLE


def test_file_info_fields() -> None:
    manifest = _assembler().assemble({"src/util.js": "export const x = 1"})
    info = manifest.files["/src/util.js"]

    assert info.path == "/src/util.js"
    assert info.relative_path == "src/util.js"
    assert info.content == "export const x = 1"
    assert info.last_modified == 1_700_000_000_000
    assert manifest.timestamp == 1_700_000_000_000


def test_routes_and_tree_are_derived_from_files() -> None:
    calls: List[List[str]] = []

    def tree_builder(files):  # type: ignore[no-untyped-def]
        calls.append(list(files))
        return {"built": True}

    manifest = _assembler(tree_builder=tree_builder).assemble(
        {"src/pages/about.jsx": "export default function About() {}"}
    )

    assert calls == [["/src/pages/about.jsx"]]
    assert manifest.component_tree == {"built": True}
    assert manifest.routes == [RouteInfo(path="/about", component="/src/pages/about.jsx")]
    assert all(route.component in manifest.files for route in manifest.routes)


def test_manifest_to_dict_uses_wire_names() -> None:
    data = _assembler().assemble({"src/main.jsx": ""}).to_dict()

    assert set(data) == {"files", "routes", "componentTree", "entryPoint", "styleFiles", "timestamp"}
    assert data["files"]["/src/main.jsx"]["relativePath"] == "src/main.jsx"
    assert data["entryPoint"] == "/src/main.jsx"


def _project() -> FakeSandbox:
    return FakeSandbox(
        {
            "src/main.jsx": "import App from './App'\nimport './index.css'\n",
            "src/App.jsx": (
                "import { Route } from 'react-router-dom'\n"
                "export default function App() {\n"
                '  return <Route path="/home" element={<Home />} />\n'
                "}\n"
            ),
            "src/index.css": "body {}",
            "src/pages/index.jsx": "export default function Home() { return <main /> }",
            "src/big.js": "x",
        },
        directories=[".", "./src", "./src/pages"],
    )


def test_builder_produces_full_result() -> None:
    sandbox = _project()
    sandbox.sizes["src/big.js"] = 20_000

    result = ManifestBuilder(CommandRunner(sandbox)).build()
    manifest = result.manifest

    assert set(result.files) == {"src/main.jsx", "src/App.jsx", "src/index.css", "src/pages/index.jsx"}
    assert result.file_count == 4
    assert result.structure == ".\n./src\n./src/pages"
    assert [item.relative_path for item in result.skipped] == ["src/big.js"]
    assert "/src/big.js" not in manifest.files
    assert manifest.entry_point == "/src/main.jsx"
    assert manifest.style_files == ["/src/index.css"]
    assert manifest.routes == [
        RouteInfo(path="/home", component="/src/App.jsx"),
        RouteInfo(path="/", component="/src/pages/index.jsx"),
    ]
    assert manifest.component_tree["/src/main.jsx"]["imports"] == ["/src/App.jsx", "/src/index.css"]


def test_builder_is_idempotent() -> None:
    sandbox = _project()
    runner = CommandRunner(sandbox)

    first = ManifestBuilder(runner).build().manifest
    second = ManifestBuilder(runner).build().manifest

    assert _stable_view(first.files) == _stable_view(second.files)
    assert first.routes == second.routes
    assert first.entry_point == second.entry_point
    assert first.style_files == second.style_files


def _stable_view(files):  # type: ignore[no-untyped-def]
    # last_modified is stamped at build time and legitimately differs.
    return {
        path: (info.relative_path, info.content, info.type, info.imports, info.exports)
        for path, info in files.items()
    }


def test_builder_survives_a_client_error_on_one_file() -> None:
    sandbox = FakeSandbox({"a.js": "export const a = 1", "b.js": "export const b = 2"})
    sandbox.raise_on("./a.js", SandboxSDKError("504"))

    result = ManifestBuilder(CommandRunner(sandbox)).build()

    assert set(result.files) == {"b.js"}
    assert set(result.manifest.files) == {"/b.js"}
    assert [(item.relative_path, item.reason) for item in result.skipped] == [
        ("a.js", "transport-error")
    ]


def test_unparsed_files_omit_structural_fields() -> None:
    data = _assembler().assemble(
        {"src/App.jsx": "export default function App() {}", "src/index.css": "", "package.json": "{}"}
    ).to_dict()

    structural = {"imports", "exports", "components", "hasJSX"}
    assert structural <= set(data["files"]["/src/App.jsx"])
    assert not structural & set(data["files"]["/src/index.css"])
    assert not structural & set(data["files"]["/package.json"])
    assert data["files"]["/src/index.css"]["type"] == FILE_TYPE_STYLE
