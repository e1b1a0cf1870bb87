import pytest
from solders.keypair import Keypair

from jito_stake_pool_cli.client import get_stake_pool, get_token_account, get_validator_list
from jito_stake_pool_cli.errors import AccountNotFoundError, DeserializationError

from conftest import encode_token_account


@pytest.mark.asyncio
async def test_missing_account(client):
    address = Keypair().pubkey()
    with pytest.raises(AccountNotFoundError, match=f"AccountNotFound: pubkey={address}"):
        await get_stake_pool(client, address)


@pytest.mark.asyncio
async def test_invalid_stake_pool(client, pool):
    client.accounts[pool.address] = bytes(10)
    with pytest.raises(DeserializationError, match=f"Invalid stake pool {pool.address}"):
        await get_stake_pool(client, pool.address)


@pytest.mark.asyncio
async def test_stake_pool_is_not_validator_list(client, pool):
    with pytest.raises(DeserializationError, match=f"Invalid validator list {pool.address}"):
        await get_validator_list(client, pool.address)


@pytest.mark.asyncio
async def test_get_stake_pool(client, pool):
    stake_pool = await get_stake_pool(client, pool.address)
    validator_list = await get_validator_list(client, stake_pool.validator_list)
    assert stake_pool.reserve_stake == pool.reserve_stake
    assert validator_list.max_validators == 10
    assert validator_list.validators == []


@pytest.mark.asyncio
async def test_token_account(client, pool):
    owner = Keypair().pubkey()
    address = pool.token_account(owner)
    client.accounts[address] = encode_token_account(pool.pool_mint, owner, 1234)
    token_account = await get_token_account(client, address, pool.pool_mint)
    assert token_account.amount == 1234

    with pytest.raises(DeserializationError, match="Invalid token mint"):
        await get_token_account(client, address, Keypair().pubkey())
