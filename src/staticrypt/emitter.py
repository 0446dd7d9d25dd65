"""Render the password template and write encrypted artifacts."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .config import ResolvedOptions
from .crypto import StaticryptError, encode, hash_password
from .formatter import render_template

logger = logging.getLogger(__name__)

# Rendered into HTML attributes or text, so they get escaped. Instructions are
# inserted as-is and may contain markup.
_ESCAPED_TEMPLATE_FIELDS = (
    "template_button",
    "template_error",
    "template_placeholder",
    "template_remember",
    "template_title",
)


def _html_escape(s: str) -> str:
    """Escape a string for HTML text and attribute values."""
    return (
        s.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def _escape_for_script_block(s: str) -> str:
    """Replace ``</`` with ``<\\/`` so the text cannot close its <script>."""
    return s.replace("</", "<\\/")


def build_template_data(
    options: ResolvedOptions, encrypted_msg: str, staticrypt_js: str
) -> dict[str, Any]:
    """Build the placeholder mapping for the password template.

    Args:
        options: Resolved options for this run.
        encrypted_msg: Encoded content from crypto.encode().
        staticrypt_js: Assembled script from inliner.build_staticrypt_js().

    Returns:
        Mapping of placeholder name to replacement text.
    """
    data = dict(options.as_template_data())
    for name in _ESCAPED_TEMPLATE_FIELDS:
        data[name] = _html_escape(data[name])

    staticrypt_config = {
        "staticryptEncryptedMsgUniqueVariableName": encrypted_msg,
        "isRememberEnabled": options.is_remember_enabled,
        "rememberDurationInDays": options.remember_days or 0,
        "staticryptSaltUniqueVariableName": options.salt,
    }

    data.update(
        {
            "is_remember_enabled": json.dumps(options.is_remember_enabled),
            "js_staticrypt": staticrypt_js,
            "staticrypt_config": _escape_for_script_block(
                json.dumps(staticrypt_config)
            ),
        }
    )
    return data


def gen_file(data: Mapping[str, Any], output_path: Path, template_path: Path) -> Path:
    """Fill the template with data and write it to output_path.

    Parent directories are created as needed. The file is only opened for
    writing once rendering has succeeded.

    Raises:
        StaticryptError: If the template cannot be read or the output written.
    """
    template_path = Path(template_path)
    output_path = Path(output_path)

    try:
        template_contents = template_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read template %s: %s", template_path, e)
        raise StaticryptError(
            f'could not read template at path "{template_path}"'
        ) from e

    rendered = render_template(template_contents, data)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered, encoding="utf-8")
    except OSError as e:
        logger.error("Cannot write %s: %s", output_path, e)
        raise StaticryptError("could not generate output file") from e

    logger.info("Wrote %s", output_path)
    return output_path


def encrypt_file(
    input_path: Path,
    output_path: Path,
    options: ResolvedOptions,
    staticrypt_js: str,
    hashed_password: str | None = None,
) -> Path:
    """Encrypt one HTML file into a standalone password-protected page.

    Args:
        input_path: HTML file to protect.
        output_path: Where to write the artifact.
        options: Resolved options (password, salt, template settings).
        staticrypt_js: Assembled client script.
        hashed_password: Precomputed hash of options.password, to avoid
            re-deriving the key for every file.

    Returns:
        Path to the written artifact.

    Raises:
        StaticryptError: If reading, rendering or writing fails.
    """
    try:
        contents = Path(input_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read %s: %s", input_path, e)
        raise StaticryptError("input file does not exist!") from e

    if hashed_password is None:
        hashed_password = hash_password(options.password, options.salt)

    encrypted_msg = encode(contents, hashed_password)
    data = build_template_data(options, encrypted_msg, staticrypt_js)
    return gen_file(data, output_path, options.template_path)
