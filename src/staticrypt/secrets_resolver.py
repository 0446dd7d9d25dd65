"""Password and salt resolution for staticrypt.

Precedence:
    password: STATICRYPT_PASSWORD env var > --password > interactive prompt
    salt:     --salt value > config file > freshly generated
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

import click

from .config import ENV_PASSWORD
from .crypto import StaticryptError, generate_random_salt, generate_random_string

MIN_PASSWORD_LENGTH = 14
SUGGESTED_PASSWORD_LENGTH = 21
SALT_HEX_LENGTH = 32

_INVALID_SALT_CHARS_RE = re.compile(r"[^a-f0-9]")
_YES_RE = re.compile(r"^\s*(y|yes)\s*$", re.IGNORECASE)

Ask = Callable[..., str]


class UserAbort(StaticryptError):
    """Raised when the user declines to continue. Not a failure."""

    pass


def click_ask(question: str, hide_input: bool = False) -> str:
    """Prompt on the terminal, blocking until a line is entered."""
    return click.prompt(
        question.rstrip(),
        default="",
        show_default=False,
        prompt_suffix=" ",
        hide_input=hide_input,
    )


def resolve_password(
    password_arg: str | None,
    env: Mapping[str, str],
    ask: Ask = click_ask,
) -> str:
    """Get the password from the environment, the command line or a prompt."""
    env_password = env.get(ENV_PASSWORD)
    if env_password:
        return env_password

    if password_arg is not None:
        return password_arg

    return ask("Enter your long, unusual password: ", hide_input=True)


def enforce_password_policy(
    password: str, allow_short: bool, ask: Ask = click_ask
) -> str:
    """Require confirmation before using a short password.

    Args:
        password: Password to check.
        allow_short: Skip the check entirely (--short).
        ask: Prompt callable.

    Returns:
        The password, unchanged.

    Raises:
        UserAbort: If the user does not confirm a short password.
    """
    if allow_short or len(password) >= MIN_PASSWORD_LENGTH:
        return password

    answer = ask(
        f"WARNING: Your password is less than {MIN_PASSWORD_LENGTH} characters "
        f"(length: {len(password)}) and it's easy to try brute-forcing on public "
        "files. For better security we recommend using a longer one, for example: "
        f"{generate_random_string(SUGGESTED_PASSWORD_LENGTH)}\n"
        "You can hide this warning by increasing your password length or adding "
        "the '--short' flag. Do you want to use the short password? [y/N] "
    )
    if not _YES_RE.match(answer):
        raise UserAbort("Aborting.")

    return password


def get_validated_password(
    password_arg: str | None,
    allow_short: bool,
    env: Mapping[str, str],
    ask: Ask = click_ask,
) -> str:
    password = resolve_password(password_arg, env, ask)
    return enforce_password_policy(password, allow_short, ask)


def resolve_salt(salt_arg: str | None, config: Mapping[str, Any]) -> tuple[str, bool]:
    """Pick the salt from the flag, the config or a fresh random value.

    An empty flag value (``--salt`` given without argument) counts as absent.

    Returns:
        Tuple of (salt, generated) where generated is True for a new salt.
    """
    if salt_arg:
        return str(salt_arg).lower(), False

    if config.get("salt"):
        return str(config["salt"]), False

    return generate_random_salt(), True


def validate_salt(salt: str) -> str:
    """Check the salt is a 32 character lowercase hex string.

    Raises:
        StaticryptError: If the salt is malformed.
    """
    if len(salt) != SALT_HEX_LENGTH or _INVALID_SALT_CHARS_RE.search(salt):
        raise StaticryptError(
            f"the salt should be a {SALT_HEX_LENGTH} character long hexadecimal "
            "string (only [0-9a-f] characters allowed)"
            f"\nDetected salt: {salt}"
        )
    return salt


def get_validated_salt(salt_arg: str | None, config: Mapping[str, Any]) -> str:
    salt, _ = resolve_salt(salt_arg, config)
    return validate_salt(salt)
