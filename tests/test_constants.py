from solders.keypair import Keypair

from jito_stake_pool.constants import STAKE_POOL_PROGRAM_ID
from jito_stake_pool.constants import find_deposit_authority_program_address, find_stake_program_address
from jito_stake_pool.constants import find_transient_stake_program_address, find_withdraw_authority_program_address


def test_authorities_are_deterministic():
    stake_pool = Keypair().pubkey()
    (withdraw_authority, bump) = find_withdraw_authority_program_address(STAKE_POOL_PROGRAM_ID, stake_pool)
    assert (withdraw_authority, bump) == find_withdraw_authority_program_address(STAKE_POOL_PROGRAM_ID, stake_pool)
    (deposit_authority, _) = find_deposit_authority_program_address(STAKE_POOL_PROGRAM_ID, stake_pool)
    assert deposit_authority != withdraw_authority
    assert not withdraw_authority.is_on_curve()


def test_stake_address_seed():
    stake_pool = Keypair().pubkey()
    vote = Keypair().pubkey()
    (unseeded, _) = find_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, stake_pool, None)
    (zero_seed, _) = find_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, stake_pool, 0)
    (seeded, _) = find_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, stake_pool, 1)
    assert unseeded == zero_seed
    assert seeded != unseeded


def test_transient_stake_address():
    stake_pool = Keypair().pubkey()
    vote = Keypair().pubkey()
    (transient, _) = find_transient_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, stake_pool, 0)
    (next_transient, _) = find_transient_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, stake_pool, 1)
    (validator_stake, _) = find_stake_program_address(STAKE_POOL_PROGRAM_ID, vote, stake_pool, None)
    assert transient != next_transient
    assert transient != validator_stake
