import pytest
from construct.core import ConstructError  # type: ignore
from solders.keypair import Keypair

from jito_stake_pool.state import AccountType, Fee, StakePool, StakeStatus, ValidatorList
from stake.constants import LAMPORTS_PER_SOL, STAKE_LEN
from stake.state import StakeStake, StakeStakeType

from conftest import PoolFixture, encode_fee, encode_stake_account, encode_validator_list, validator_entry


@pytest.fixture
def pool_fixture() -> PoolFixture:
    return PoolFixture(Keypair(), Keypair())


def test_decode_stake_pool(pool_fixture):
    stake_pool = StakePool.decode(pool_fixture.encode())
    assert stake_pool.manager == pool_fixture.manager.pubkey()
    assert stake_pool.staker == pool_fixture.staker.pubkey()
    assert stake_pool.validator_list == pool_fixture.validator_list
    assert stake_pool.pool_mint == pool_fixture.pool_mint
    assert stake_pool.epoch_fee == Fee(numerator=1, denominator=100)
    assert stake_pool.next_epoch_fee is None
    assert stake_pool.sol_deposit_authority is None
    assert stake_pool.last_epoch_total_lamports == 94 * LAMPORTS_PER_SOL


def test_decode_stake_pool_optional_fields(pool_fixture):
    sol_deposit_authority = Keypair().pubkey()
    preferred = Keypair().pubkey()
    data = pool_fixture.encode(
        next_epoch_fee_option=2,
        next_epoch_fee=encode_fee(3, 1000),
        preferred_withdraw_validator_option=1,
        preferred_withdraw_validator=bytes(preferred),
        sol_deposit_authority_option=1,
        sol_deposit_authority=bytes(sol_deposit_authority),
    )
    stake_pool = StakePool.decode(data)
    assert stake_pool.next_epoch_fee == Fee(numerator=3, denominator=1000)
    assert stake_pool.preferred_deposit_validator is None
    assert stake_pool.preferred_withdraw_validator == preferred
    assert stake_pool.sol_deposit_authority == sol_deposit_authority
    # fields after the options are still aligned
    assert stake_pool.sol_referral_fee == 20
    assert stake_pool.last_epoch_pool_token_supply == 90 * LAMPORTS_PER_SOL


def test_decode_truncated_stake_pool(pool_fixture):
    with pytest.raises(ConstructError):
        StakePool.decode(pool_fixture.encode()[:100])


def test_decode_wrong_account_type(pool_fixture):
    data = pool_fixture.encode(account_type=AccountType.VALIDATOR_LIST)
    with pytest.raises(ValueError):
        StakePool.decode(data)


def test_validator_list():
    votes = [Keypair().pubkey() for _ in range(3)]
    data = encode_validator_list(5, [
        validator_entry(votes[0]),
        validator_entry(votes[1], status=StakeStatus.DEACTIVATING_VALIDATOR, validator_seed_suffix=7),
    ])
    validator_list = ValidatorList.decode(data)
    assert validator_list.max_validators == 5
    assert len(validator_list.validators) == 2
    assert validator_list.contains(votes[0])
    assert not validator_list.contains(votes[2])
    entry = validator_list.find(votes[1])
    assert entry.status == StakeStatus.DEACTIVATING_VALIDATOR
    assert entry.validator_seed_suffix == 7
    assert entry.stake_lamports() == 10 * LAMPORTS_PER_SOL


def test_validator_list_size():
    assert ValidatorList.calculate_validator_list_size(0) == 9
    assert ValidatorList.calculate_validator_list_size(10) == 9 + 73 * 10


def test_fee():
    assert Fee(numerator=0, denominator=100).is_zero()
    assert Fee(numerator=1, denominator=0).is_zero()
    assert not Fee(numerator=1, denominator=100).is_zero()
    assert str(Fee(numerator=3, denominator=100)) == "3/100"


def test_decode_stake_account():
    authority = Keypair().pubkey()
    vote = Keypair().pubkey()
    data = encode_stake_account(authority, vote)
    assert len(data) <= STAKE_LEN
    stake = StakeStake.decode(data)
    assert stake.state_type == StakeStakeType.STAKE
    assert stake.authorized.withdrawer == authority
    assert stake.delegation.voter_pubkey == vote

    initialized = StakeStake.decode(encode_stake_account(authority, None, StakeStakeType.INITIALIZED))
    assert initialized.authorized.staker == authority
    assert initialized.delegation is None
