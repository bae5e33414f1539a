#!/usr/bin/env python3
"""
MyToken Deploy CLI

Deploys the token behind a UUPS proxy on a fresh local chain and, unless
told otherwise, upgrades it to the configured second version.

Usage:
    mytoken-deploy deploy [--config FILE] [--no-upgrade]
    mytoken-deploy config [--config FILE]
    mytoken-deploy accounts [--config FILE]
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import click

from mytoken import __version__
from mytoken.chain import LocalChain, get_contract_factory
from mytoken.config import MyTokenConfig, load_config
from mytoken.exceptions import MyTokenException
from mytoken.logger import configure_logging
from mytoken.upgrades import deploy_proxy, get_implementation_address, upgrade_proxy


def _load(config_path: Optional[str]) -> MyTokenConfig:
    try:
        config = load_config(config_path)
        config.validate()
    except MyTokenException as e:
        raise click.ClickException(str(e))

    configure_logging(
        log_level=config.logging.level,
        log_file=Path(config.logging.file) if config.logging.file else None,
        console_output=config.logging.console,
        file_output=bool(config.logging.file),
    )
    return config


def _build_chain(config: MyTokenConfig) -> LocalChain:
    network = config.network
    return LocalChain(
        accounts=network.accounts,
        initial_balance=network.initial_balance_wei,
        chain_id=network.chain_id,
        seed=network.account_seed,
    )


async def run_deployment(config: MyTokenConfig, upgrade: bool = True) -> dict:
    """
    Deploy the first version behind a proxy, then optionally upgrade it.

    Returns:
        Summary with the proxy address and each implementation address
    """
    chain = _build_chain(config)
    deployer = chain.signers[config.deploy.deployer_index]

    factory = get_contract_factory(chain, config.deploy.contract, deployer)
    token = await deploy_proxy(
        chain,
        factory,
        initializer=config.deploy.initializer or None,
        kind=config.deploy.kind,
    )
    click.echo(f"First version deployed to: {token.address}")

    summary = {
        "proxy": token.address,
        "deployer": deployer.address,
        "implementations": [get_implementation_address(chain, token.address)],
    }

    if upgrade and config.deploy.upgrade_to:
        factory_v2 = get_contract_factory(chain, config.deploy.upgrade_to, deployer)
        token = await upgrade_proxy(chain, token, factory_v2, kind=config.deploy.kind)
        summary["implementations"].append(get_implementation_address(chain, token.address))
        click.echo(click.style("Successfully upgraded", fg="green"))

    summary["version"] = await token.version()
    return summary


@click.group()
@click.version_option(version=__version__, prog_name="mytoken-deploy")
def cli():
    """MyToken deployment tools."""
    pass


@cli.command()
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to config.toml (default: $MYTOKEN_CONFIG or ./config.toml)")
@click.option("--no-upgrade", is_flag=True, help="Stop after deploying the first version")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON summary")
def deploy(config_path: Optional[str], no_upgrade: bool, as_json: bool):
    """Deploy MyToken behind a UUPS proxy and upgrade it."""
    config = _load(config_path)

    try:
        summary = asyncio.run(run_deployment(config, upgrade=not no_upgrade))
    except MyTokenException as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(summary, indent=2))
    else:
        click.echo(f"Proxy:           {summary['proxy']}")
        click.echo(f"Implementation:  {summary['implementations'][-1]}")
        click.echo(f"Version:         {summary['version']}")


@cli.command("config")
@click.option("--config", "config_path", type=click.Path(), default=None)
def show_config(config_path: Optional[str]):
    """Show the resolved configuration."""
    config = _load(config_path)
    click.echo(json.dumps(config.to_dict(), indent=2))


@cli.command()
@click.option("--config", "config_path", type=click.Path(), default=None)
def accounts(config_path: Optional[str]):
    """List the funded development accounts."""
    config = _load(config_path)
    chain = _build_chain(config)
    for signer in chain.signers:
        marker = click.style(" (deployer)", fg="cyan") if signer.index == config.deploy.deployer_index else ""
        click.echo(f"{signer.index:>3}  {signer.address}{marker}")


if __name__ == "__main__":
    cli()
