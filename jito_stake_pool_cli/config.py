"""Command line configuration: Solana CLI config file, keypairs and the per-run `Config`."""

import json
import logging
import os
from typing import Any, Dict, List, NamedTuple, Optional

import yaml
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.keypair import Keypair

from jito_stake_pool_cli.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_JSON_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_CONFIG_FILE = os.path.join("~", ".config", "solana", "cli", "config.yml")
DEFAULT_KEYPAIR_PATH = os.path.join("~", ".config", "solana", "id.json")


class CliConfig(NamedTuple):
    """Subset of the Solana CLI config file used by this client."""
    json_rpc_url: str = DEFAULT_JSON_RPC_URL
    keypair_path: str = DEFAULT_KEYPAIR_PATH


class Config(NamedTuple):
    """Everything a command needs, built once per invocation."""
    client: AsyncClient
    manager: Keypair
    staker: Keypair
    funding_authority: Optional[Keypair]
    token_owner: Keypair
    fee_payer: Keypair
    verbose: bool = False
    output_format: Optional[str] = None
    dry_run: bool = False
    no_update: bool = False


def load_cli_config(config_file: Optional[str]) -> CliConfig:
    """Reads a Solana CLI YAML config file.

    With no explicit file, the default location is used when it exists; otherwise
    the defaults apply.
    """
    if config_file is None:
        default_path = os.path.expanduser(DEFAULT_CONFIG_FILE)
        if not os.path.exists(default_path):
            return CliConfig()
        config_file = default_path

    try:
        with open(os.path.expanduser(config_file), 'r') as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not load config file {config_file}: {e}") from e

    logger.debug("Loaded config file %s", config_file)
    return CliConfig(
        json_rpc_url=data.get('json_rpc_url') or DEFAULT_JSON_RPC_URL,
        keypair_path=data.get('keypair_path') or DEFAULT_KEYPAIR_PATH,
    )


def keypair_from_file(keyfile_name: str) -> Keypair:
    try:
        with open(os.path.expanduser(keyfile_name), 'r') as keyfile:
            int_list: List[int] = json.loads(keyfile.read())
        return Keypair.from_bytes(bytes(int_list))
    except (OSError, ValueError, TypeError) as e:
        raise ConfigError(f"Could not read keypair file {keyfile_name}: {e}") from e


def get_signer(path: Optional[str], default_path: str) -> Keypair:
    return keypair_from_file(path or default_path)


def new_client(json_rpc_url: str) -> AsyncClient:
    logger.debug("Connecting to network at %s", json_rpc_url)
    return AsyncClient(endpoint=json_rpc_url, commitment=Confirmed)
