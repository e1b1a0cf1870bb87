import pytest

from jito_stake_pool.constants import STAKE_POOL_PROGRAM_ID, find_stake_program_address
from jito_stake_pool_cli.commands.validators import command_add_validator, command_decrease_validator_stake
from jito_stake_pool_cli.commands.validators import command_increase_validator_stake, command_remove_validator
from jito_stake_pool_cli.errors import InsufficientFundsError, StakePoolCliError

from conftest import required_signers, validator_entry


@pytest.mark.asyncio
async def test_add_validator(config, client, pool, validators, capsys):
    vote = validators[0]
    await command_add_validator(config, pool.address, vote)

    (validator_stake, _) = find_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, pool.address, None)
    out = capsys.readouterr().out
    assert f"Adding stake account {validator_stake}, delegated to {vote}" in out
    assert "Signature: " in out
    assert len(client.sent) == 1
    assert set(required_signers(client.sent[0])) == {config.fee_payer.pubkey(), config.staker.pubkey()}


@pytest.mark.asyncio
async def test_add_validator_already_in_pool(config, client, pool, validators, capsys):
    vote = validators[0]
    pool.install(client, [validator_entry(vote)])
    await command_add_validator(config, pool.address, vote)

    assert client.sent == []
    assert f"Stake pool already contains validator {vote}, ignoring" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_add_validator_dry_run(config, client, pool, validators, capsys):
    await command_add_validator(config._replace(dry_run=True), pool.address, validators[0])

    assert client.sent == []
    assert len(client.simulated) == 1
    assert "Simulate result: " in capsys.readouterr().out


@pytest.mark.asyncio
async def test_add_validator_insufficient_fee_payer_balance(config, client, pool, validators):
    client.balances[config.fee_payer.pubkey()] = 1
    with pytest.raises(InsufficientFundsError, match="has insufficient balance"):
        await command_add_validator(config, pool.address, validators[0])
    assert client.sent == []


@pytest.mark.asyncio
async def test_increase_validator_stake(config, client, pool, validators):
    pool.install(client, [validator_entry(vote, transient_seed_suffix=4) for vote in validators])
    await command_increase_validator_stake(config, pool.address, validators[1], 1.5)

    assert len(client.sent) == 1
    message = client.sent[0].message
    data = bytes(message.instructions[0].data)
    assert data == bytes([4]) + (1_500_000_000).to_bytes(8, 'little') + (4).to_bytes(8, 'little')


@pytest.mark.asyncio
async def test_increase_validator_stake_missing_vote_account(config, client, pool, validators):
    pool.install(client, [validator_entry(validators[0])])
    with pytest.raises(StakePoolCliError, match="Vote account not found in validator list"):
        await command_increase_validator_stake(config, pool.address, validators[1], 1.0)
    assert client.sent == []


@pytest.mark.asyncio
async def test_decrease_validator_stake_invalid_amount(config, client, pool, validators):
    pool.install(client, [validator_entry(validators[0])])
    with pytest.raises(StakePoolCliError, match="must be greater than 0 SOL"):
        await command_decrease_validator_stake(config, pool.address, validators[0], 0)


@pytest.mark.asyncio
async def test_remove_validator(config, client, pool, validators, capsys):
    vote = validators[2]
    pool.install(client, [validator_entry(vote, validator_seed_suffix=9)])
    await command_remove_validator(config, pool.address, vote)

    (validator_stake, _) = find_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, pool.address, 9)
    assert f"Removing stake account {validator_stake}, delegated to {vote}" in capsys.readouterr().out
    assert len(client.sent) == 1
