"""RPC queries returning decoded stake pool accounts."""

from construct.core import ConstructError  # type: ignore
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.pubkey import Pubkey
from spl.token._layouts import ACCOUNT_LAYOUT

from jito_stake_pool.state import StakePool, ValidatorList
from stake.state import StakeStake
from jito_stake_pool_cli.errors import AccountNotFoundError, DeserializationError


async def get_account_data(client: AsyncClient, address: Pubkey) -> bytes:
    resp = await client.get_account_info(address, commitment=Confirmed)
    if resp.value is None:
        raise AccountNotFoundError(address)
    return bytes(resp.value.data)


async def get_stake_pool(client: AsyncClient, stake_pool_address: Pubkey) -> StakePool:
    data = await get_account_data(client, stake_pool_address)
    try:
        return StakePool.decode(data)
    except (ConstructError, ValueError) as e:
        raise DeserializationError(f"Invalid stake pool {stake_pool_address}: {e}") from e


async def get_validator_list(client: AsyncClient, validator_list_address: Pubkey) -> ValidatorList:
    data = await get_account_data(client, validator_list_address)
    try:
        return ValidatorList.decode(data)
    except (ConstructError, ValueError) as e:
        raise DeserializationError(f"Invalid validator list {validator_list_address}: {e}") from e


async def get_token_account(client: AsyncClient, token_account_address: Pubkey, expected_token_mint: Pubkey):
    """Returns the parsed token account, checking it holds tokens of `expected_token_mint`."""
    data = await get_account_data(client, token_account_address)
    try:
        token_account = ACCOUNT_LAYOUT.parse(data)
    except ConstructError as e:
        raise DeserializationError(f"Invalid token account {token_account_address}: {e}") from e
    if Pubkey(token_account.mint) != expected_token_mint:
        raise DeserializationError(
            f"Invalid token mint for {token_account_address}, expected mint is {expected_token_mint}"
        )
    return token_account


async def get_stake_state(client: AsyncClient, stake_address: Pubkey) -> StakeStake:
    data = await get_account_data(client, stake_address)
    try:
        return StakeStake.decode(data)
    except (ConstructError, ValueError) as e:
        raise DeserializationError(f"Invalid stake account {stake_address}: {e}") from e


async def get_balance(client: AsyncClient, address: Pubkey) -> int:
    resp = await client.get_balance(address, commitment=Confirmed)
    return resp.value
