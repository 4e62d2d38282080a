"""End-to-end tests for building a source tree."""

import hashlib
from pathlib import Path

import pytest

from cachebust.build import TreeBuild, build_tree
from cachebust.config import BuildConfig
from cachebust.errors import ConfigError, EmitError, ExitCode
from cachebust.parser import extract_imports


def md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def read_tree(root):
    return {
        p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()
    }


class TestInPlaceBuild:
    """Builds without an output directory rewrite the source tree."""

    def test_spec_example(self, make_tree):
        root = make_tree({"a.js": "import './b.js'", "b.js": "console.log(1)"})

        entries = build_tree(root)

        assert (root / "b.js").read_text() == "console.log(1)"
        expected_hash = md5(b"console.log(1)")
        assert (root / "a.js").read_text() == f"import './b.js?v={expected_hash}'"
        assert {e.path: e.modified for e in entries} == {"a.js": True, "b.js": False}

    def test_no_imports_byte_identical(self, make_tree):
        code = "// héllo\r\nexport const x = 1;\r\n"
        root = make_tree({"x.js": code})
        before = (root / "x.js").read_bytes()

        entries = build_tree(root)

        assert (root / "x.js").read_bytes() == before
        assert entries[0].modified is False


class TestOutputBuild:
    """Builds with an output directory mirror the tree."""

    def test_structure_and_copies(self, make_tree, tmp_path):
        root = make_tree(
            {
                "index.js": "import { b } from './lib/b.js';\n",
                "lib/b.js": "export const b = 1;\n",
                "styles/site.css": "body {}\n",
                "index.html": "<script type=module src=index.js></script>\n",
            }
        )
        source_before = read_tree(root)
        out = tmp_path / "dist"

        entries = build_tree(root, out)

        assert read_tree(root) == source_before
        output = read_tree(out)
        assert set(output) == set(source_before)
        assert output["styles/site.css"] == b"body {}\n"
        assert output["lib/b.js"] == b"export const b = 1;\n"
        b_hash = md5(b"export const b = 1;\n")
        assert output["index.js"] == f"import {{ b }} from './lib/b.js?v={b_hash}';\n".encode()
        assert [e.path for e in entries if e.modified] == ["index.js"]

    def test_hash_matches_final_output(self, make_tree, tmp_path):
        root = make_tree(
            {
                "app.js": "import './ui.js';\nimport './util.js';\n",
                "ui.js": "import './widgets.js';\n",
                "widgets.js": "import './util.js?v=stale';\nexport default 1;\n",
                "util.js": "export const util = true;\n",
            }
        )
        out = tmp_path / "dist"
        build_tree(root, out)

        for path in out.rglob("*.js"):
            for edge in extract_imports(path.read_bytes(), path.name):
                target = (path.parent / edge.path).resolve()
                assert edge.version == md5(target.read_bytes()), path.name

    def test_exclude_pattern(self, make_tree, tmp_path):
        code = "import './vendor/lib.js';\nimport './own.js';\n"
        root = make_tree({"a.js": code, "vendor/lib.js": "import './x.js'", "own.js": ""})
        out = tmp_path / "dist"

        build_tree(root, out, ["vendor/**"])

        specifiers = [e.specifier for e in extract_imports((out / "a.js").read_bytes(), "a.js")]
        assert specifiers == ["./vendor/lib.js", f"./own.js?v={md5(b'')}"]
        assert (out / "vendor" / "lib.js").read_text() == "import './x.js'"

    def test_non_source_extension_untouched(self, make_tree, tmp_path):
        root = make_tree({"a.js": "import './data.json';\n", "data.json": "{}"})
        out = tmp_path / "dist"

        build_tree(root, out)

        assert (out / "a.js").read_text() == "import './data.json';\n"

    def test_mjs_modules(self, make_tree, tmp_path):
        root = make_tree({"main.mjs": "import './dep.mjs';\n", "dep.mjs": "export {};\n"})
        out = tmp_path / "dist"

        build_tree(root, out)

        dep_hash = md5(b"export {};\n")
        assert (out / "main.mjs").read_text() == f"import './dep.mjs?v={dep_hash}';\n"

    def test_idempotent(self, make_tree, tmp_path):
        root = make_tree(
            {
                "a.js": "import './b.js';\nimport './c.js';\n",
                "b.js": "import './c.js';\n",
                "c.js": "export default 'c';\n",
            }
        )
        first = tmp_path / "first"
        second = tmp_path / "second"

        build_tree(root, first)
        entries = build_tree(first, second)

        assert read_tree(first) == read_tree(second)
        assert not any(e.modified for e in entries)

    def test_cycle(self, make_tree, tmp_path):
        root = make_tree({"a.js": "import './b.js';\n", "b.js": "import './a.js';\n"})

        build_tree(root, tmp_path / "one")
        build_tree(root, tmp_path / "two")

        assert read_tree(tmp_path / "one") == read_tree(tmp_path / "two")

    def test_symlinked_module_outside_tree(self, make_tree, tmp_path):
        root = make_tree({"a.js": "import './shared.js';\n"})
        shared = tmp_path / "shared.js"
        shared.write_text("export const shared = 1;\n")
        try:
            (root / "shared.js").symlink_to(Path("..") / "shared.js")
        except OSError:
            pytest.skip("symlinks not supported")
        out = tmp_path / "dist"

        entries = build_tree(root, out)

        digest = md5(b"export const shared = 1;\n")
        assert (out / "a.js").read_text() == f"import './shared.js?v={digest}';\n"
        assert (out / "shared.js").read_text() == "export const shared = 1;\n"
        assert {e.path: e.modified for e in entries} == {"a.js": True, "shared.js": False}

    def test_output_nested_in_source_is_skipped(self, make_tree):
        root = make_tree({"a.js": "import './b.js'", "b.js": "1"})
        out = root / "dist"

        build_tree(root, out)
        entries = build_tree(root, out)

        assert sorted(e.path for e in entries) == ["a.js", "b.js"]
        assert not (out / "dist").exists()


class TestBuildErrors:
    """Error handling during a build."""

    def test_missing_source_root(self, tmp_path):
        with pytest.raises(ConfigError):
            build_tree(tmp_path / "nope", tmp_path / "dist")
        assert not (tmp_path / "dist").exists()

    def test_parse_error_copied_unmodified(self, make_tree, tmp_path):
        broken = "import {{{ from './b.js'\n"
        root = make_tree({"broken.js": broken, "b.js": "", "a.js": "import './broken.js'"})
        out = tmp_path / "dist"

        result = TreeBuild(root, out).run()

        assert (out / "broken.js").read_text() == broken
        assert (out / "a.js").read_text() == f"import './broken.js?v={md5(broken.encode())}'"
        assert [s["path"] for s in result.skipped] == ["broken.js"]
        assert result.exit_code == ExitCode.PARTIAL_SUCCESS

    def test_clean_removes_stale_files(self, make_tree, tmp_path):
        root = make_tree({"a.js": ""})
        out = tmp_path / "dist"
        out.mkdir()
        (out / "stale.js").write_text("old")

        TreeBuild(root, out, clean=True).run()

        assert not (out / "stale.js").exists()
        assert (out / "a.js").exists()

    def test_clean_refuses_source_ancestor(self, make_tree, tmp_path):
        root = make_tree({"a.js": ""})

        with pytest.raises(ConfigError):
            TreeBuild(root, tmp_path, clean=True).run()
        assert (root / "a.js").exists()

    def test_from_config(self, make_tree, tmp_path):
        root = make_tree({"a.js": "import './b.js'", "b.js": ""})
        config = BuildConfig(sourcedir=root, outputdir=tmp_path / "dist", clean_output=True)

        build = TreeBuild.from_config(config)
        result = build.run()

        assert build.clean is True
        assert result.exit_code == ExitCode.SUCCESS
        assert [e.path for e in result.modified] == ["a.js"]

    def test_write_failure_aborts(self, make_tree, tmp_path):
        root = make_tree({"a.js": "", "b.js": "import './a.js'", "c.js": ""})
        out = tmp_path / "dist"
        # A directory where the rewritten b.js has to go
        (out / "b.js").mkdir(parents=True)

        with pytest.raises(EmitError) as exc_info:
            TreeBuild(root, out).run()

        assert exc_info.value.exit_code == ExitCode.FATAL_ERROR
        assert exc_info.value.file_path == str(out.resolve() / "b.js")
        assert (out / "a.js").is_file()
        assert not (out / "c.js").exists()
