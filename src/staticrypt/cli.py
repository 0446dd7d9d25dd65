"""Command-line interface for staticrypt."""

import os
from pathlib import Path

import click
import yaml

from . import __version__
from .config import (
    CONFIG_FILENAME,
    DEFAULT_OUTPUT_DIR,
    PASSWORD_TEMPLATE_DEFAULT_PATH,
    ResolvedOptions,
    TemplateConfig,
    load_config,
    parse_remember,
    resolve_config_path,
    update_config_salt,
)
from .crypto import StaticryptError, hash_password, share_link
from .emitter import encrypt_file
from .inliner import build_staticrypt_js
from .secrets_resolver import UserAbort, get_validated_password, get_validated_salt


class FatalError(click.ClickException):
    """Unrecoverable error: printed as ``ERROR: ...`` on stdout, exit status 1."""

    exit_code = 1

    def show(self, file=None):
        click.echo(f"ERROR: {self.format_message()}", file=file)


@click.command()
@click.version_option(version=__version__, prog_name="staticrypt")
@click.argument("paths", nargs=-1, type=click.Path())
@click.option(
    "-c",
    "--config",
    "config_arg",
    default=CONFIG_FILENAME,
    show_default=True,
    help='Path to the config file. Set to "false" to disable.',
)
@click.option(
    "-d",
    "--directory",
    "output_dir",
    type=click.Path(),
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Name of the directory where the encrypted files will be saved.",
)
@click.option(
    "-p",
    "--password",
    help="Password to encrypt with. Prompted for if omitted. "
    "STATICRYPT_PASSWORD in the environment takes precedence.",
)
@click.option(
    "--remember",
    default="0",
    show_default=True,
    help='Expiration in days of the "Remember me" checkbox (0 = no expiration). '
    'Set to "false" to hide the box.',
)
# No default for --salt and --share: "-s" alone and no "-s" at all mean
# different things.
@click.option(
    "-s",
    "--salt",
    "salt_arg",
    is_flag=False,
    flag_value="",
    default=None,
    help="32-character hex salt to use. Pass the flag without a value to "
    "generate one, save it to the config file and print it.",
)
@click.option(
    "--share",
    is_flag=False,
    flag_value="",
    default=None,
    help="Print a link that auto-decrypts the page: pass your URL to append "
    '"#staticrypt_pwd=<hashed_pwd>", or leave empty to print only the fragment.',
)
@click.option("--short", is_flag=True, help='Hide the "short password" warning.')
@click.option("-r", "--recursive", is_flag=True, help="Process directories recursively")
@click.option(
    "-t",
    "--template",
    "template_path",
    type=click.Path(),
    default=str(PASSWORD_TEMPLATE_DEFAULT_PATH),
    help="Path to custom HTML template with password prompt.",
)
@click.option(
    "--template-button",
    default=TemplateConfig.template_button,
    show_default=True,
    help="Label to use for the decrypt button.",
)
@click.option(
    "--template-instructions",
    default=TemplateConfig.template_instructions,
    help="Special instructions to display to the user.",
)
@click.option(
    "--template-error",
    default=TemplateConfig.template_error,
    show_default=True,
    help="Error message to display on entering wrong password.",
)
@click.option(
    "--template-placeholder",
    default=TemplateConfig.template_placeholder,
    show_default=True,
    help="Placeholder to use for the password input.",
)
@click.option(
    "--template-remember",
    default=TemplateConfig.template_remember,
    show_default=True,
    help='Label to use for the "Remember me" checkbox.',
)
@click.option(
    "--template-title",
    default=TemplateConfig.template_title,
    show_default=True,
    help="Title for the output HTML page.",
)
def main(
    paths,
    config_arg,
    output_dir,
    password,
    remember,
    salt_arg,
    share,
    short,
    recursive,
    template_path,
    template_button,
    template_instructions,
    template_error,
    template_placeholder,
    template_remember,
    template_title,
):
    """Password-protect static HTML files.

    Each input file is encrypted into a standalone HTML page that asks for
    the password and decrypts itself in the browser.

    \b
    Examples:
      staticrypt index.html
      staticrypt index.html -p "long unusual password" -d public/
      staticrypt site/ -r --remember 30
      staticrypt -s                       # generate and save a salt
      staticrypt --share https://example.com/index.html
    """
    if not paths and salt_arg is None and share is None:
        raise FatalError("No files or directories specified")

    try:
        config_path = resolve_config_path(config_arg)
        config = load_config(config_path)

        salt = get_validated_salt(salt_arg, config)
        update_config_salt(config_path, config, salt)

        # "-s" without files: just show the salt
        if salt_arg is not None and not paths and share is None:
            click.echo(salt)
            return

        remember_days = parse_remember(remember)

        pwd = get_validated_password(password, short, os.environ)
        hashed_password = hash_password(pwd, salt)

        if share is not None:
            click.echo(share_link(share, hashed_password))
            return

        options = ResolvedOptions(
            password=pwd,
            salt=salt,
            output_dir=output_dir,
            template_path=Path(template_path),
            remember_days=remember_days,
            template=TemplateConfig(
                template_button=template_button,
                template_instructions=template_instructions,
                template_error=template_error,
                template_placeholder=template_placeholder,
                template_remember=template_remember,
                template_title=template_title,
            ),
        )

        files = _collect_files(paths, recursive)
        if not files:
            click.echo("No HTML files found")
            return

        staticrypt_js = build_staticrypt_js()
        output_base = Path(options.output_dir)

        for input_path in files:
            output_path = _get_output_path(input_path, paths, output_base)
            encrypt_file(
                input_path,
                output_path,
                options,
                staticrypt_js,
                hashed_password=hashed_password,
            )
            click.echo(
                f"Encrypted: {_relative_path(input_path)} -> "
                f"{_relative_path(output_path)}"
            )
    except UserAbort as e:
        click.echo(str(e))
    except StaticryptError as e:
        raise FatalError(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="staticrypt-config")
def config_cli():
    """Inspect the staticrypt config file."""
    pass


@config_cli.command("show")
@click.option(
    "-c",
    "--config",
    "config_arg",
    default=CONFIG_FILENAME,
    show_default=True,
    help="Config file path",
)
def config_show(config_arg):
    """Display the persisted configuration.

    Unknown fields are shown as stored. The password is never persisted,
    so it never appears here.
    """
    config_path = resolve_config_path(config_arg)
    if config_path is None:
        click.echo("Config file disabled")
        return
    if not config_path.is_file():
        click.echo(f"No config file at {config_path}")
        return

    try:
        data = load_config(config_path)
    except StaticryptError as e:
        raise FatalError(str(e))

    click.echo(f"# {config_path}")
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False), nl=False)


def _collect_files(paths: tuple, recursive: bool) -> list[Path]:
    """Collect files to encrypt.

    Files named explicitly are always included; directories contribute
    their HTML files.

    Args:
        paths: Tuple of file/directory paths.
        recursive: Whether to search directories recursively.

    Returns:
        Sorted list of file paths.

    Raises:
        StaticryptError: If a path is neither a file nor a directory.
    """
    files = []
    html_extensions = {".html", ".htm"}

    for path_str in paths:
        path = Path(path_str)

        if path.is_file():
            files.append(path)
        elif path.is_dir():
            candidates = path.rglob("*") if recursive else path.glob("*")
            files.extend(
                p
                for p in candidates
                if p.is_file() and p.suffix.lower() in html_extensions
            )
        else:
            raise StaticryptError("input file does not exist!")

    return sorted(set(files))


def _get_output_path(input_path: Path, source_paths: tuple, output_base: Path) -> Path:
    """Map an input page to its encrypted artifact under ``--directory``.

    Files inside a directory argument keep their path relative to it, so
    ``staticrypt site/ -r`` mirrors the tree. Files named directly land at
    the top of the output directory. The output directory is not excluded
    from the scan: with ``-d site/encrypted`` a later ``-r`` run picks up
    the previous artifacts and encrypts them again.

    Args:
        input_path: Page being encrypted.
        source_paths: File and directory arguments as given on the command line.
        output_base: The ``--directory`` value.

    Returns:
        Where the artifact for ``input_path`` is written.
    """
    input_resolved = input_path.resolve()

    for source in source_paths:
        source_path = Path(source).resolve()

        if source_path.is_file():
            if input_resolved == source_path:
                return output_base / input_path.name
        elif source_path.is_dir():
            try:
                rel = input_resolved.relative_to(source_path)
                return output_base / rel
            except ValueError:
                continue

    return output_base / input_path.name


def _relative_path(path: Path) -> str:
    """Shorten a path for the ``Encrypted: a -> b`` progress line."""
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main()
