import pytest

from jito_stake_pool.constants import MAX_VALIDATORS_TO_UPDATE
from jito_stake_pool_cli.commands.update import command_update, maybe_update

from conftest import CURRENT_EPOCH, required_signers, validator_entry


@pytest.mark.asyncio
async def test_update_not_required(config, client, pool, capsys):
    await command_update(config, pool.address, force=False, no_merge=False)
    assert capsys.readouterr().out.strip() == "Update not required"
    assert client.sent == []


@pytest.mark.asyncio
async def test_update_forced(config, client, pool, capsys):
    await command_update(config, pool.address, force=True, no_merge=False)
    assert "--force flag specified, so doing it anyway" in capsys.readouterr().out
    assert len(client.sent) == 1


@pytest.mark.asyncio
async def test_update_in_chunks(config, client, pool, validators):
    votes = validators * (MAX_VALIDATORS_TO_UPDATE // len(validators) + 1)
    assert MAX_VALIDATORS_TO_UPDATE < len(votes) <= 2 * MAX_VALIDATORS_TO_UPDATE
    pool.install(client, [validator_entry(vote) for vote in votes], last_update_epoch=CURRENT_EPOCH - 1)

    await command_update(config, pool.address, force=False, no_merge=True)

    # two validator list chunks, then pool balance update and cleanup together
    assert len(client.sent) == 3
    assert client.sent_opts[0].skip_confirmation
    assert not client.sent_opts[1].skip_confirmation
    assert len(client.sent[2].message.instructions) == 2
    for txn in client.sent:
        assert required_signers(txn) == [config.fee_payer.pubkey()]


@pytest.mark.asyncio
async def test_no_update_flag(config, client, pool, capsys):
    pool.install(client, last_update_epoch=CURRENT_EPOCH - 1)
    config = config._replace(no_update=True)

    await maybe_update(config, pool.address)
    assert client.sent == []

    await command_update(config, pool.address, force=True, no_merge=False)
    assert "--no-update flag specified, so doing nothing" in capsys.readouterr().out
    assert client.sent == []
