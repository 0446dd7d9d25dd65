"""Inline the staticrypt browser modules into a single script.

A dead-simple alternative to a real bundler, for a small fixed set of
CommonJS-style modules shipped under ``assets/``:

- every line that calls ``require(`` is dropped;
- the rest is wrapped in an immediately invoked function that declares a
  local ``exports`` object and returns it.

The transformation is purely textual. Multi-line requires, requires inside
strings or comments, and transitive dependencies are not handled.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .config import ASSETS_DIR
from .crypto import StaticryptError
from .formatter import render_template

logger = logging.getLogger(__name__)

REQUIRE_LINE_RE = re.compile(r"^.*\brequire\(.*$\n?", re.MULTILINE)

ROOT_MODULE = "lib/staticryptJs"
INJECTED_MODULES = {
    "js_codec": "lib/codec",
    "js_crypto_engine": "lib/cryptoEngine",
}


@dataclass(frozen=True)
class SourceFragment:
    """Raw text of one module, keyed by its logical module path."""

    module_path: str
    text: str

    @classmethod
    def load(cls, module_path: str, root: Path = ASSETS_DIR) -> "SourceFragment":
        """Read ``<root>/<module_path>.js``.

        Raises:
            StaticryptError: If the module file does not exist.
        """
        *parents, name = module_path.split("/")
        resolved = Path(root).joinpath(*parents, f"{name}.js")
        if not resolved.is_file():
            raise StaticryptError(
                f'could not find module to convert at path "{resolved}"'
            )
        try:
            text = resolved.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Cannot read %s: %s", resolved, e)
            raise StaticryptError(f'could not read module at path "{resolved}"') from e
        return cls(module_path, text)

    def strip_imports(self) -> "SourceFragment":
        return SourceFragment(self.module_path, REQUIRE_LINE_RE.sub("", self.text))

    def wrap(self) -> str:
        """Wrap the text so it evaluates to its local ``exports`` object."""
        return f"""
((function(){{
  const exports = {{}};
  {self.text}
  return exports;
}})())
  """.strip()


def convert_commonjs_to_browser_js(module_path: str, root: Path = ASSETS_DIR) -> str:
    """Turn a module into an expression usable in a browser ``<script>``.

    Args:
        module_path: Path from the assets root, without the ``.js`` suffix.
        root: Directory module paths are resolved against.

    Returns:
        Self-contained JS expression yielding the module's exports.
    """
    fragment = SourceFragment.load(module_path, root).strip_imports()
    logger.debug("Inlined module %s", module_path)
    return fragment.wrap()


def build_staticrypt_js(root: Path = ASSETS_DIR) -> str:
    """Build the staticrypt script string to inject in the password template."""
    staticrypt_js = convert_commonjs_to_browser_js(ROOT_MODULE, root)

    scripts_to_inject = {
        name: convert_commonjs_to_browser_js(path, root)
        for name, path in INJECTED_MODULES.items()
    }

    return render_template(staticrypt_js, scripts_to_inject)
