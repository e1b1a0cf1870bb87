import pytest
from solders.keypair import Keypair

from jito_stake_pool.state import Fee
from jito_stake_pool.instructions import FeeType, FundingType, PreferredValidatorType
from jito_stake_pool_cli.commands.manage import command_set_fee, command_set_funding_authority
from jito_stake_pool_cli.commands.manage import command_set_manager, command_set_preferred_validator
from jito_stake_pool_cli.commands.manage import command_set_referral_fee, command_set_staker
from jito_stake_pool_cli.errors import DeserializationError, StakePoolCliError

from conftest import encode_token_account, required_signers


def instruction_data(client):
    return bytes(client.sent[-1].message.instructions[0].data)


@pytest.mark.asyncio
async def test_set_manager(config, client, pool):
    new_manager = Keypair()
    await command_set_manager(config, pool.address, new_manager=new_manager)

    assert set(required_signers(client.sent[0])) == {
        config.fee_payer.pubkey(), config.manager.pubkey(), new_manager.pubkey()}
    assert instruction_data(client) == bytes([11])


@pytest.mark.asyncio
async def test_set_manager_fee_receiver_mint(config, client, pool):
    fee_receiver = Keypair().pubkey()
    client.accounts[fee_receiver] = encode_token_account(Keypair().pubkey(), config.manager.pubkey(), 0)
    with pytest.raises(DeserializationError, match="Invalid token mint"):
        await command_set_manager(config, pool.address, new_fee_receiver=fee_receiver)

    client.accounts[fee_receiver] = encode_token_account(pool.pool_mint, config.manager.pubkey(), 0)
    await command_set_manager(config, pool.address, new_fee_receiver=fee_receiver)
    assert len(client.sent) == 1


@pytest.mark.asyncio
async def test_set_manager_nothing_to_change(config, client, pool):
    with pytest.raises(StakePoolCliError):
        await command_set_manager(config, pool.address)


@pytest.mark.asyncio
async def test_set_staker(config, client, pool):
    await command_set_staker(config, pool.address, Keypair().pubkey())
    assert set(required_signers(client.sent[0])) == {config.fee_payer.pubkey(), config.manager.pubkey()}
    assert instruction_data(client) == bytes([13])


@pytest.mark.asyncio
async def test_set_funding_authority(config, client, pool):
    await command_set_funding_authority(config, pool.address, FundingType.SOL_WITHDRAW, Keypair().pubkey())
    assert instruction_data(client) == bytes([15, 2])
    assert len(client.sent[0].message.instructions[0].accounts) == 3

    await command_set_funding_authority(config, pool.address, FundingType.STAKE_DEPOSIT, None)
    assert len(client.sent[1].message.instructions[0].accounts) == 2


@pytest.mark.asyncio
async def test_set_fee(config, client, pool):
    await command_set_fee(config, pool.address, FeeType.SOL_WITHDRAWAL, Fee(numerator=3, denominator=1000))
    assert instruction_data(client) == bytes([12, 6]) + (1000).to_bytes(8, 'little') + (3).to_bytes(8, 'little')


@pytest.mark.asyncio
async def test_set_fee_above_one_hundred_percent(config, client, pool):
    with pytest.raises(StakePoolCliError, match="must not exceed 100%"):
        await command_set_fee(config, pool.address, FeeType.EPOCH, Fee(numerator=2, denominator=1))
    assert client.sent == []


@pytest.mark.asyncio
async def test_set_referral_fee(config, client, pool):
    await command_set_referral_fee(config, pool.address, FeeType.STAKE_REFERRAL, 100)
    assert instruction_data(client) == bytes([12, 1, 100])

    with pytest.raises(StakePoolCliError, match=r"Invalid fee 101%. Fee needs to be in range \[0-100\]"):
        await command_set_referral_fee(config, pool.address, FeeType.SOL_REFERRAL, 101)
    assert len(client.sent) == 1


@pytest.mark.asyncio
async def test_set_preferred_validator(config, client, pool, validators):
    await command_set_preferred_validator(config, pool.address, PreferredValidatorType.DEPOSIT, validators[0])
    assert instruction_data(client) == bytes([5, 0, 1]) + bytes(validators[0])
    assert set(required_signers(client.sent[0])) == {config.fee_payer.pubkey(), config.staker.pubkey()}

    await command_set_preferred_validator(config, pool.address, PreferredValidatorType.DEPOSIT, None)
    assert instruction_data(client) == bytes([5, 0, 0])
