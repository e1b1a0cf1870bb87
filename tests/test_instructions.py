from solders.keypair import Keypair

from jito_stake_pool.constants import MAX_VALIDATORS_TO_UPDATE, STAKE_POOL_PROGRAM_ID
from jito_stake_pool.state import Fee, StakePool, ValidatorList
import jito_stake_pool.instructions as sp
from jito_stake_pool.instructions import FeeType, FundingType, InstructionType, PreferredValidatorType

from conftest import PoolFixture, encode_validator_list, validator_entry


def make_pool():
    pool = PoolFixture(Keypair(), Keypair())
    return pool, StakePool.decode(pool.encode())


def test_add_validator_uses_pool_accounts():
    pool, stake_pool = make_pool()
    funder = Keypair().pubkey()
    vote = Keypair().pubkey()
    ix = sp.add_validator_to_pool_with_vote(STAKE_POOL_PROGRAM_ID, stake_pool, pool.address, funder, vote)
    assert ix.program_id == STAKE_POOL_PROGRAM_ID
    assert bytes(ix.data) == bytes([InstructionType.ADD_VALIDATOR_TO_POOL])
    assert len(ix.accounts) == 13
    signers = [meta.pubkey for meta in ix.accounts if meta.is_signer]
    assert signers == [pool.staker.pubkey(), funder]
    assert ix.accounts[6].pubkey == vote


def test_remove_validator_accounts():
    pool, stake_pool = make_pool()
    ix = sp.remove_validator_from_pool_with_vote(
        STAKE_POOL_PROGRAM_ID, stake_pool, pool.address, Keypair().pubkey(), None, 0)
    assert bytes(ix.data) == bytes([InstructionType.REMOVE_VALIDATOR_FROM_POOL])
    assert len(ix.accounts) == 8


def test_move_stake_data():
    pool, stake_pool = make_pool()
    vote = Keypair().pubkey()
    lamports = 1_500_000_000
    increase = sp.increase_validator_stake_with_vote(
        STAKE_POOL_PROGRAM_ID, stake_pool, pool.address, vote, lamports, None, 3)
    assert bytes(increase.data) == bytes([4]) + lamports.to_bytes(8, 'little') + (3).to_bytes(8, 'little')
    decrease = sp.decrease_validator_stake_with_vote(
        STAKE_POOL_PROGRAM_ID, stake_pool, pool.address, vote, lamports, None, 3)
    assert bytes(decrease.data) == bytes([21]) + lamports.to_bytes(8, 'little') + (3).to_bytes(8, 'little')


def test_set_fee_data():
    pool = PoolFixture(Keypair(), Keypair())
    epoch = sp.set_fee(sp.SetFeeParams(
        program_id=STAKE_POOL_PROGRAM_ID,
        stake_pool=pool.address,
        manager=pool.manager.pubkey(),
        fee_type=FeeType.EPOCH,
        fee=Fee(numerator=1, denominator=100),
    ))
    # fees go on the wire denominator first
    assert bytes(epoch.data) == bytes([12, 2]) + (100).to_bytes(8, 'little') + (1).to_bytes(8, 'little')

    referral = sp.set_fee(sp.SetFeeParams(
        program_id=STAKE_POOL_PROGRAM_ID,
        stake_pool=pool.address,
        manager=pool.manager.pubkey(),
        fee_type=FeeType.SOL_REFERRAL,
        fee=50,
    ))
    assert bytes(referral.data) == bytes([12, 0, 50])


def test_set_preferred_validator_data():
    pool = PoolFixture(Keypair(), Keypair())
    vote = Keypair().pubkey()
    params = sp.SetPreferredValidatorParams(
        program_id=STAKE_POOL_PROGRAM_ID,
        stake_pool=pool.address,
        staker=pool.staker.pubkey(),
        validator_list=pool.validator_list,
        validator_type=PreferredValidatorType.WITHDRAW,
        validator_vote_address=vote,
    )
    assert bytes(sp.set_preferred_validator(params).data) == bytes([5, 1, 1]) + bytes(vote)
    unset = sp.set_preferred_validator(params._replace(validator_vote_address=None))
    assert bytes(unset.data) == bytes([5, 1, 0])


def test_set_funding_authority_unset():
    pool = PoolFixture(Keypair(), Keypair())
    ix = sp.set_funding_authority(sp.SetFundingAuthorityParams(
        program_id=STAKE_POOL_PROGRAM_ID,
        stake_pool=pool.address,
        manager=pool.manager.pubkey(),
        funding_type=FundingType.SOL_DEPOSIT,
    ))
    assert bytes(ix.data) == bytes([15, 1])
    assert len(ix.accounts) == 2


def test_withdraw_sol_authority():
    pool = PoolFixture(Keypair(), Keypair())
    authority = Keypair().pubkey()
    params = sp.WithdrawSolParams(
        program_id=STAKE_POOL_PROGRAM_ID,
        stake_pool=pool.address,
        withdraw_authority=Keypair().pubkey(),
        source_transfer_authority=Keypair().pubkey(),
        source_pool_account=Keypair().pubkey(),
        reserve_stake=pool.reserve_stake,
        destination_system_account=Keypair().pubkey(),
        manager_fee_account=pool.manager_fee_account,
        pool_mint=pool.pool_mint,
        token_program_id=Keypair().pubkey(),
        amount=42,
    )
    assert len(sp.withdraw_sol(params).accounts) == 12
    ix = sp.withdraw_sol(params._replace(sol_withdraw_authority=authority))
    assert len(ix.accounts) == 13
    assert ix.accounts[-1].pubkey == authority
    assert ix.accounts[-1].is_signer
    assert bytes(ix.data) == bytes([16]) + (42).to_bytes(8, 'little')


def test_update_stake_pool_chunks():
    pool = PoolFixture(Keypair(), Keypair())
    stake_pool = StakePool.decode(pool.encode())
    num_validators = 2 * MAX_VALIDATORS_TO_UPDATE + 2
    validator_list = ValidatorList.decode(encode_validator_list(
        20, [validator_entry(Keypair().pubkey()) for _ in range(num_validators)]))

    update_list_instructions, final_instructions = sp.update_stake_pool(
        STAKE_POOL_PROGRAM_ID, stake_pool, validator_list, pool.address, False)

    assert len(update_list_instructions) == 3
    start_indexes = [
        sp.INSTRUCTIONS_LAYOUT.parse(bytes(ix.data)).args.start_index for ix in update_list_instructions
    ]
    assert start_indexes == [0, MAX_VALIDATORS_TO_UPDATE, 2 * MAX_VALIDATORS_TO_UPDATE]
    # one validator and one transient stake account per validator
    assert len(update_list_instructions[-1].accounts) == 7 + 2 * 2
    assert [bytes(ix.data)[0] for ix in final_instructions] == [
        InstructionType.UPDATE_STAKE_POOL_BALANCE,
        InstructionType.CLEANUP_REMOVED_VALIDATOR_ENTRIES,
    ]
