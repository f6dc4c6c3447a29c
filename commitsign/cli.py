"""commitsign CLI application with Typer."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from commitsign import __version__
from commitsign.bootstrap import bootstrap_application
from commitsign.config import get_settings, set_settings
from commitsign.errors import KeyResolutionError, SigningError

app = typer.Typer(
    name="commitsign",
    help="Sign and verify commit payloads with keys from a GnuPG home",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"commitsign version {__version__}")
        raise typer.Exit()


def _configure_logging(level: str) -> None:
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level.upper())


def _read_payload(path: Path | None) -> bytes:
    if path is None:
        return typer.get_binary_stream("stdin").read()
    try:
        return path.read_bytes()
    except OSError as exc:
        typer.secho(f"Error: cannot read {path}: {exc.strerror or exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


def _fail(exc: Exception) -> NoReturn:
    if isinstance(exc, KeyResolutionError):
        label = "Key not found"
    elif isinstance(exc, SigningError):
        label = "Signing failed"
    else:
        label = "Error"
    typer.secho(f"{label}: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=2) from exc


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    gnupg_home: Annotated[
        Path | None,
        typer.Option("--gnupg-home", help="Override the GnuPG home directory"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log key resolution details"),
    ] = False,
) -> None:
    """commitsign - detached OpenPGP signatures for commits."""
    # Update settings with CLI flags
    settings = get_settings()
    if gnupg_home:
        settings.gnupg_home = gnupg_home
    set_settings(settings)
    _configure_logging("DEBUG" if verbose else settings.log_level)


@app.command("sign")
def sign(
    key_id: Annotated[
        str | None,
        typer.Option("--key-id", "-k", help="Signing key (defaults to the configured signing key)"),
    ] = None,
    input_path: Annotated[
        Path | None,
        typer.Option("--input", "-i", help="Payload file (reads stdin when omitted)"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the signature here instead of stdout"),
    ] = None,
    secret_key_path: Annotated[
        Path | None,
        typer.Option("--secret-key-path", help="Sign with this secret keyring"),
    ] = None,
    attempts: Annotated[
        int | None,
        typer.Option("--attempts", min=1, help="Passphrase prompts before giving up"),
    ] = None,
) -> None:
    """Print a detached signature in commit header form.

    Example:
        git cat-file commit HEAD | commitsign sign --key-id A5FEE80C60FFA4D9
    """
    settings = get_settings()
    if attempts is not None:
        settings.passphrase_attempts = attempts
    container = bootstrap_application(settings)
    try:
        payload = _read_payload(input_path)
        try:
            signature = container.signer.sign(payload, key_id, secret_key_path=secret_key_path)
        except (SigningError, ValueError) as exc:
            _fail(exc)
    finally:
        container.close()

    if output is None:
        typer.echo(signature.decode("ascii"), nl=False)
    else:
        output.write_bytes(signature)
        typer.secho(f"Signature written to {output}", fg=typer.colors.GREEN, err=True)


@app.command("verify")
def verify(
    key_id: Annotated[str, typer.Option("--key-id", "-k", help="Expected signer")],
    signature_path: Annotated[
        Path,
        typer.Option("--signature", "-s", help="Armored signature, plain or in header form"),
    ],
    input_path: Annotated[
        Path | None,
        typer.Option("--input", "-i", help="Signed payload (reads stdin when omitted)"),
    ] = None,
) -> None:
    """Check a detached signature; exits 1 when it does not verify."""
    container = bootstrap_application(get_settings())
    payload = _read_payload(input_path)
    try:
        signature = signature_path.read_bytes()
    except OSError as exc:
        typer.secho(
            f"Error: cannot read {signature_path}: {exc.strerror or exc}", fg=typer.colors.RED, err=True
        )
        raise typer.Exit(code=2) from exc

    try:
        valid = container.signer.verify(payload, signature, key_id)
    except (SigningError, ValueError) as exc:
        _fail(exc)

    if valid:
        typer.secho(f"Good signature from {key_id.upper()}", fg=typer.colors.GREEN)
        return
    typer.secho(f"BAD signature for {key_id.upper()}", fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command("locate")
def locate(
    key_id: Annotated[str, typer.Argument(help="Hex key identifier (16 to 40 digits)")],
) -> None:
    """Print the public key a key identifier refers to."""
    container = bootstrap_application(get_settings())
    try:
        record = container.signer.find_public_key(key_id)
    except (SigningError, ValueError) as exc:
        _fail(exc)

    if record is None:
        typer.secho(f"No public key matches {key_id}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    typer.echo(f"fingerprint: {record.fingerprint_hex}")
    typer.echo(f"key id:      {record.key_id}")
    typer.echo(f"algorithm:   {record.algorithm_name}")
    if record.source is not None:
        typer.echo(f"source:      {record.source}")


if __name__ == "__main__":
    app()
