"""
Command-line interface for pokeauth.
"""

from __future__ import annotations

import binascii
import json
import time

import click

from pokeauth.auth.ptc import PtcCredentialProvider
from pokeauth.client.config_loader import ConfigLoader
from pokeauth.common.exceptions import PokeAuthError
from pokeauth.common.models import ClientConfig
from pokeauth.hashing.encoding import decode_bytes
from pokeauth.hashing.pokehash import PokeHashProvider
from pokeauth.hashing.profiles import PROFILES


def _decode_base64(value: str, name: str) -> bytes:
    try:
        return decode_bytes(value)
    except binascii.Error as err:
        msg = f"{name} is not valid base64"
        raise click.BadParameter(msg) from err


@click.group()
def cli() -> None:
    """pokeauth CLI"""


@cli.command()
@click.option("--username", envvar="POKEAUTH_PTC_USERNAME", help="PTC username")
@click.option(
    "--password",
    envvar="POKEAUTH_PTC_PASSWORD",
    help="PTC password (default: from POKEAUTH_PTC_PASSWORD env)",
)
@click.option("--no-retry", is_flag=True, help="Make a single login attempt")
@click.option("--show-token", is_flag=True, help="Print the session ticket")
def login(
    username: str | None,
    password: str | None,
    no_retry: bool,  # noqa: FBT001
    show_token: bool,  # noqa: FBT001
) -> None:
    """Log in to the Pokémon Trainer Club"""
    loader = ConfigLoader(
        ClientConfig(username=username, password=password, should_retry=not no_retry)
    )
    try:
        username, password = loader.require_credentials()
        provider = PtcCredentialProvider(
            username,
            password,
            config=loader.config,
            max_attempts=loader.max_login_attempts,
            should_retry=loader.should_retry,
        )
        token = provider.get_token_id()
    except (PokeAuthError, ValueError) as err:
        raise click.ClickException(str(err)) from err

    expires = time.strftime(
        "%Y-%m-%d %H:%M:%S", time.localtime(provider.expires_timestamp / 1000)
    )
    click.echo(f"Logged in, token valid until {expires}")
    if show_token:
        click.echo(token)


@cli.command(name="hash")
@click.option("--key", envvar="POKEAUTH_HASH_KEY", help="Hashing service key")
@click.option("--profile", default=None, help="Hashing service generation")
@click.option("--endpoint", default=None, help="Override the profile endpoint")
@click.option(
    "--max-limit-retries",
    type=int,
    default=None,
    help="Retries after a 429 while awaiting quota (negative: unbounded)",
)
@click.option("--await-quota", is_flag=True, help="Wait for the quota instead of failing")
@click.option("--latitude", type=float, required=True)
@click.option("--longitude", type=float, required=True)
@click.option("--altitude", type=float, default=0.0, show_default=True)
@click.option("--auth-ticket", default="", help="Base64 auth ticket")
@click.option("--session-data", default="", help="Base64 session data")
@click.option("--request", "request_payloads", multiple=True, help="Base64 request")
def hash_command(
    key: str | None,
    profile: str | None,
    endpoint: str | None,
    max_limit_retries: int | None,
    await_quota: bool,  # noqa: FBT001
    latitude: float,
    longitude: float,
    altitude: float,
    auth_ticket: str,
    session_data: str,
    request_payloads: tuple[str, ...],
) -> None:
    """Sign a request with the hashing service"""
    loader = ConfigLoader(
        ClientConfig(
            hash_key=key,
            hash_profile=profile,
            hash_endpoint=endpoint,
            max_limit_retries=max_limit_retries,
            await_quota=await_quota or None,
        )
    )
    try:
        provider = PokeHashProvider(
            loader.require_hash_key(),
            profile=loader.load_profile(),
            await_quota=loader.await_quota,
            max_limit_retries=loader.max_limit_retries,
            config=loader.config,
            timeout=loader.http_timeout,
        )
        result = provider.provide(
            int(time.time() * 1000),
            latitude,
            longitude,
            altitude,
            _decode_base64(auth_ticket, "--auth-ticket"),
            _decode_base64(session_data, "--session-data"),
            [_decode_base64(r, "--request") for r in request_payloads],
        )
    except (PokeAuthError, ValueError) as err:
        raise click.ClickException(str(err)) from err

    quota = provider.rate_limit.snapshot()
    click.echo(json.dumps(result.model_dump(), indent=2))
    click.echo(
        f"Quota: {quota.requests_remaining}/{quota.max_requests} "
        f"requests left, period ends at {quota.period_end}"
    )


@cli.command()
def profiles() -> None:
    """List known hashing service generations"""
    for name, profile in sorted(PROFILES.items()):
        click.echo(f"{name}\tversion={profile.version}\t{profile.endpoint}")


if __name__ == "__main__":
    cli()
