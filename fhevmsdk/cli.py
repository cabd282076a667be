# SPDX-License-Identifier: Apache-2.0
"""Click CLI entry point. Install with: pip install . then fhevm --help."""
from __future__ import annotations

import asyncio
import importlib
import json

import click
from pydantic import ValidationError

from .client import FhevmClient
from .config import SEPOLIA_CHAIN_ID, ClientConfig
from .engine import EngineFactory
from .exceptions import RETRYABLE_ERRORS, FhevmError
from .resilience import retry
from .schemas import EncryptionContext
from .signer import LocalAccountSigner
from .types import EncryptedType, parse_numeric_input

TYPE_CHOICE = click.Choice([t.value for t in EncryptedType], case_sensitive=False)


def load_engine_factory(reference: str) -> EngineFactory:
    """Resolve 'package.module:factory' to the engine factory callable."""
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"expected 'module:factory', got {reference!r}", param_hint="--engine")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"cannot import {module_name}: {exc}", param_hint="--engine") from exc
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise click.BadParameter(f"{reference} is not callable", param_hint="--engine")
    return factory


def _build_client(ctx: click.Context) -> FhevmClient:
    opts = ctx.obj
    if not opts.get("engine"):
        raise click.UsageError("An encryption engine is required: pass --engine or set FHEVM_ENGINE")
    overrides = {"gateway_url": opts["gateway_url"]} if opts.get("gateway_url") else {}
    try:
        config = ClientConfig.for_chain(opts["chain_id"], **overrides)
    except ValidationError as exc:
        raise click.UsageError(f"Invalid configuration: {exc}") from exc
    return FhevmClient(config, load_engine_factory(opts["engine"]))


def _run(coro):
    try:
        return asyncio.run(coro)
    except FhevmError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--chain-id", default=SEPOLIA_CHAIN_ID, show_default=True, type=int, envvar="FHEVM_CHAIN_ID", help="Network chain id")
@click.option("--gateway-url", default=None, envvar="FHEVM_GATEWAY_URL", help="Decryption gateway base URL")
@click.option("--engine", default=None, envvar="FHEVM_ENGINE", help="Encryption engine factory as module:callable")
@click.pass_context
def cli(ctx, chain_id, gateway_url, engine):
    """FHEVM SDK: encrypt contract inputs and decrypt handles via the gateway."""
    ctx.ensure_object(dict)
    ctx.obj.update(chain_id=chain_id, gateway_url=gateway_url, engine=engine)


@cli.command()
@click.argument("value")
@click.option("--type", "etype", required=True, type=TYPE_CHOICE, help="Encrypted type")
def validate(value, etype):
    """Check that VALUE fits the encrypted type, without encrypting it."""
    try:
        wire = parse_numeric_input(value, etype)
    except FhevmError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps({"type": etype.lower(), "value": wire}))


@cli.command("public-key")
@click.pass_context
def public_key(ctx):
    """Initialize against the network and print its public key."""
    client = _build_client(ctx)

    async def run():
        async with client:
            await client.init()
            return client.get_public_key()

    click.echo(_run(run()))


@cli.command()
@click.argument("value")
@click.option("--type", "etype", required=True, type=TYPE_CHOICE, help="Encrypted type")
@click.option("--contract", "contract_address", required=True, help="Contract address the input is bound to")
@click.option("--user", "user_address", required=True, help="User address the input is bound to")
@click.pass_context
def encrypt(ctx, value, etype, contract_address, user_address):
    """Encrypt VALUE and print handles and input proof as JSON."""
    try:
        wire = parse_numeric_input(value, etype)
        context = EncryptionContext.of(contract_address, user_address)
    except FhevmError as exc:
        raise click.ClickException(str(exc)) from exc
    client = _build_client(ctx)

    async def run():
        async with client:
            await client.init()
            return await client.encrypt(wire, etype, context)

    click.echo(json.dumps(_run(run()).to_contract_args()))


@cli.command()
@click.argument("handle")
@click.option("--contract", "contract_address", required=True, help="Contract holding the handle")
@click.option("--user", "user_address", required=True, help="User entitled to decrypt")
@click.option("--private-key", required=True, envvar="FHEVM_PRIVATE_KEY", help="Key used to sign the authorization")
@click.option("--type", "etype", default=None, type=TYPE_CHOICE, help="Expected encrypted type of the handle")
@click.option("--retries", default=3, show_default=True, type=click.IntRange(min=1), help="Gateway attempts")
@click.pass_context
def decrypt(ctx, handle, contract_address, user_address, private_key, etype, retries):
    """Decrypt HANDLE through the gateway and print the plaintext."""
    try:
        context = EncryptionContext.of(contract_address, user_address)
    except FhevmError as exc:
        raise click.ClickException(str(exc)) from exc
    try:
        signer = LocalAccountSigner(private_key)
    except (ValueError, TypeError) as exc:
        raise click.BadParameter("not a valid private key", param_hint="--private-key") from exc
    client = _build_client(ctx)

    async def run():
        async with client:
            await client.init()
            return await retry(
                lambda: client.decrypt(handle, context, signer, etype),
                max_attempts=retries,
                retry_on=RETRYABLE_ERRORS,
            )

    click.echo(json.dumps({"handle": handle, "value": _run(run())}))


def main():
    """Entry point for console_scripts."""
    cli(obj={})


if __name__ == "__main__":
    main()
