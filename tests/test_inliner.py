"""Tests for staticrypt.inliner module."""

import pytest

from staticrypt.crypto import StaticryptError
from staticrypt.inliner import (
    SourceFragment,
    build_staticrypt_js,
    convert_commonjs_to_browser_js,
)


@pytest.fixture
def module_root(tmp_path):
    """Assets root with a small CommonJS module tree."""
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "greeter.js").write_text(
        'const helper = require("./helper");\n'
        "function greet(name) {\n"
        '    return "Hello " + name;\n'
        "}\n"
        "exports.greet = greet;\n"
        "exports.version = 2;\n"
    )
    return tmp_path


class TestSourceFragment:
    """Tests for SourceFragment."""

    def test_load(self, module_root):
        fragment = SourceFragment.load("lib/greeter", module_root)
        assert fragment.module_path == "lib/greeter"
        assert "exports.greet" in fragment.text

    def test_load_missing_module(self, tmp_path):
        with pytest.raises(StaticryptError, match="could not find module") as exc:
            SourceFragment.load("lib/nope", tmp_path)
        assert str(tmp_path / "lib" / "nope.js") in str(exc.value)

    def test_strip_imports_removes_whole_lines(self):
        fragment = SourceFragment(
            "m",
            "const a = require('a');\n"
            "  const { b } = require(\"b\");\n"
            "const c = 1;\n"
            "exports.c = c;",
        )
        assert fragment.strip_imports().text == "const c = 1;\nexports.c = c;"

    def test_strip_imports_last_line_without_newline(self):
        fragment = SourceFragment("m", "exports.a = 1;\nrequire('x')")
        assert fragment.strip_imports().text == "exports.a = 1;\n"

    def test_strip_imports_is_word_bounded(self):
        """Only a standalone ``require(`` call marks a line for removal."""
        text = "exports.prerequire = prerequire(1);\n"
        assert SourceFragment("m", text).strip_imports().text == text

    def test_strip_imports_returns_new_fragment(self):
        original = SourceFragment("m", "require('x');\nexports.a = 1;\n")
        stripped = original.strip_imports()
        assert stripped is not original
        assert "require" in original.text

    def test_wrap(self):
        wrapped = SourceFragment("m", "exports.a = 1;").wrap()
        assert wrapped == (
            "((function(){\n"
            "  const exports = {};\n"
            "  exports.a = 1;\n"
            "  return exports;\n"
            "})())"
        )


class TestConvertCommonjsToBrowserJs:
    """Tests for convert_commonjs_to_browser_js()."""

    def test_import_line_removed(self, module_root):
        result = convert_commonjs_to_browser_js("lib/greeter", module_root)
        assert "require(" not in result
        assert "helper" not in result

    def test_body_wrapped_in_isolated_scope(self, module_root):
        result = convert_commonjs_to_browser_js("lib/greeter", module_root)

        assert result.startswith("((function(){\n  const exports = {};")
        assert result.endswith("return exports;\n})())")
        assert "exports.greet = greet;" in result
        assert "exports.version = 2;" in result

    def test_missing_module(self, tmp_path):
        with pytest.raises(StaticryptError, match="could not find module"):
            convert_commonjs_to_browser_js("lib/missing", tmp_path)


class TestBuildStaticryptJs:
    """Tests for build_staticrypt_js()."""

    @pytest.fixture
    def fake_root(self, tmp_path):
        lib = tmp_path / "lib"
        lib.mkdir()
        (lib / "staticryptJs.js").write_text(
            "const cryptoEngine = {{js_crypto_engine}};\n"
            "const codec = {{js_codec}};\n"
            "exports.init = function () { return codec; };\n"
        )
        (lib / "codec.js").write_text("exports.codecMarker = true;\n")
        (lib / "cryptoEngine.js").write_text(
            'const crypto = require("crypto").webcrypto;\n'
            "exports.engineMarker = true;\n"
        )
        return tmp_path

    def test_injects_dependencies(self, fake_root):
        script = build_staticrypt_js(fake_root)

        assert "{{" not in script
        assert "exports.codecMarker = true;" in script
        assert "exports.engineMarker = true;" in script
        assert "require(" not in script

    def test_single_outer_scope(self, fake_root):
        script = build_staticrypt_js(fake_root)
        assert script.startswith("((function(){")
        assert script.endswith("})())")
        assert "const cryptoEngine = ((function(){" in script
        assert "const codec = ((function(){" in script

    def test_missing_dependency(self, fake_root):
        (fake_root / "lib" / "codec.js").unlink()
        with pytest.raises(StaticryptError, match="codec.js"):
            build_staticrypt_js(fake_root)

    def test_bundled_assets(self):
        """The shipped modules assemble into one flat script."""
        script = build_staticrypt_js()

        assert "require(" not in script
        assert "{{js_" not in script
        assert "hashPassword" in script
        assert "signMessage" in script
        assert "handleDecryptionOfPage" in script
        assert "</script" not in script
