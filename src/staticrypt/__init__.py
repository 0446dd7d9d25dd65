"""staticrypt - Password-protect static HTML files, decrypted in the browser."""

__version__ = "0.1.0"

from .crypto import StaticryptError, decode, encode, hash_password
from .emitter import encrypt_file, gen_file
from .formatter import render_template
from .inliner import build_staticrypt_js, convert_commonjs_to_browser_js

__all__ = [
    "encode",
    "decode",
    "hash_password",
    "StaticryptError",
    "encrypt_file",
    "gen_file",
    "render_template",
    "build_staticrypt_js",
    "convert_commonjs_to_browser_js",
    "__version__",
]
