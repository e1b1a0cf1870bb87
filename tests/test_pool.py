import json

import pytest
from solders.keypair import Keypair

from jito_stake_pool.state import Fee
from jito_stake_pool_cli.commands.pool import command_create_pool, command_list
from jito_stake_pool_cli.errors import InsufficientFundsError, StakePoolCliError

from conftest import required_signers, validator_entry

EPOCH_FEE = Fee(numerator=1, denominator=100)
ZERO_FEE = Fee(numerator=0, denominator=0)


@pytest.mark.asyncio
async def test_create_pool_zero_epoch_fee(config, client):
    with pytest.raises(StakePoolCliError, match="Epoch fee should not be 0"):
        await command_create_pool(config, None, ZERO_FEE, EPOCH_FEE, EPOCH_FEE, 0, 10)
    assert client.sent == []


@pytest.mark.asyncio
async def test_create_pool_zero_withdrawal_and_deposit_fees(config, client):
    with pytest.raises(StakePoolCliError, match="Withdrawal and deposit fee should not both be 0"):
        await command_create_pool(config, None, EPOCH_FEE, ZERO_FEE, ZERO_FEE, 0, 10)
    assert client.sent == []


@pytest.mark.asyncio
async def test_create_pool_invalid_referral_fee(config, client):
    with pytest.raises(StakePoolCliError, match=r"Fee needs to be in range \[0-100\]"):
        await command_create_pool(config, None, EPOCH_FEE, EPOCH_FEE, ZERO_FEE, 101, 10)


@pytest.mark.asyncio
async def test_create_pool(config, client, capsys):
    stake_pool = Keypair()
    validator_list = Keypair()
    mint = Keypair()
    reserve = Keypair()
    deposit_authority = Keypair()
    await command_create_pool(
        config, deposit_authority, ZERO_FEE, ZERO_FEE, ZERO_FEE, 0, 10,
        stake_pool_keypair=stake_pool,
        validator_list_keypair=validator_list,
        mint_keypair=mint,
        reserve_keypair=reserve,
        unsafe_fees=True,
    )

    out = capsys.readouterr().out
    assert f"Creating reserve stake {reserve.pubkey()}" in out
    assert f"Creating mint {mint.pubkey()}" in out
    assert f"Creating stake pool {stake_pool.pubkey()} with validator list {validator_list.pubkey()}" in out
    assert len(client.sent) == 2
    (setup, initialize) = client.sent
    assert set(required_signers(setup)) == {config.fee_payer.pubkey(), mint.pubkey(), reserve.pubkey()}
    assert set(required_signers(initialize)) == {
        config.fee_payer.pubkey(),
        stake_pool.pubkey(),
        validator_list.pubkey(),
        config.manager.pubkey(),
        deposit_authority.pubkey(),
    }


@pytest.mark.asyncio
async def test_create_pool_insufficient_balance(config, client):
    client.balances[config.fee_payer.pubkey()] = 1_000_000
    with pytest.raises(InsufficientFundsError):
        await command_create_pool(config, None, EPOCH_FEE, EPOCH_FEE, EPOCH_FEE, 0, 10)
    assert client.sent == []


@pytest.mark.asyncio
async def test_list_json(config, client, pool, validators, capsys):
    pool.install(client, [validator_entry(vote) for vote in validators])
    await command_list(config._replace(output_format='json-compact'), pool.address)

    listed = json.loads(capsys.readouterr().out)
    assert listed['address'] == str(pool.address)
    assert listed['epochFee'] == {'numerator': 1, 'denominator': 100}
    assert listed['solDepositAuthority'] is None
    assert [validator['voteAccountAddress'] for validator in listed['validators']] == [str(v) for v in validators]


@pytest.mark.asyncio
async def test_list_text(config, client, pool, validators, capsys):
    pool.install(client, [validator_entry(validators[0])])
    await command_list(config, pool.address)

    out = capsys.readouterr().out
    assert f"Stake Pool: {pool.address}" in out
    assert f"Vote Account: {validators[0]}\tBalance: ◎10.000000000" in out
    assert "Epoch Fee: 1/100 of epoch rewards" in out
    assert "Current Number of Validators: 1" in out
