"""Staker commands managing the pool's validators and their stake."""

import sys

from solders.pubkey import Pubkey

from jito_stake_pool.constants import STAKE_POOL_PROGRAM_ID, find_stake_program_address
from jito_stake_pool.state import ValidatorStakeInfo
import jito_stake_pool.instructions as sp
from jito_stake_pool_cli.client import get_stake_pool, get_validator_list
from jito_stake_pool_cli.commands.update import maybe_update
from jito_stake_pool_cli.config import Config
from jito_stake_pool_cli.errors import StakePoolCliError
from jito_stake_pool_cli.output import positive_lamports
from jito_stake_pool_cli.transaction import checked_transaction_with_signers, send_transaction


async def find_validator(config: Config, stake_pool_address: Pubkey, vote_account: Pubkey):
    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    validator_list = await get_validator_list(config.client, stake_pool.validator_list)
    validator_stake_info = validator_list.find(vote_account)
    if validator_stake_info is None:
        raise StakePoolCliError("Vote account not found in validator list")
    return stake_pool, validator_stake_info


def validator_seed(validator_stake_info: ValidatorStakeInfo):
    return validator_stake_info.validator_seed_suffix or None


async def command_add_validator(config: Config, stake_pool_address: Pubkey, vote_account: Pubkey):
    (stake_account_address, _) = find_stake_program_address(
        STAKE_POOL_PROGRAM_ID, vote_account, stake_pool_address, None)
    print(f"Adding stake account {stake_account_address}, delegated to {vote_account}")

    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    validator_list = await get_validator_list(config.client, stake_pool.validator_list)
    if validator_list.contains(vote_account):
        print(f"Stake pool already contains validator {vote_account}, ignoring", file=sys.stderr)
        return

    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.add_validator_to_pool_with_vote(
                STAKE_POOL_PROGRAM_ID,
                stake_pool,
                stake_pool_address,
                config.fee_payer.pubkey(),
                vote_account,
            )
        ],
        [config.fee_payer, config.staker],
    )
    await send_transaction(config, transaction)


async def command_remove_validator(config: Config, stake_pool_address: Pubkey, vote_account: Pubkey):
    await maybe_update(config, stake_pool_address)

    stake_pool, validator_stake_info = await find_validator(config, stake_pool_address, vote_account)
    seed = validator_seed(validator_stake_info)
    (stake_account_address, _) = find_stake_program_address(
        STAKE_POOL_PROGRAM_ID, vote_account, stake_pool_address, seed)
    print(f"Removing stake account {stake_account_address}, delegated to {vote_account}")

    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.remove_validator_from_pool_with_vote(
                STAKE_POOL_PROGRAM_ID,
                stake_pool,
                stake_pool_address,
                vote_account,
                seed,
                validator_stake_info.transient_seed_suffix,
            )
        ],
        [config.fee_payer, config.staker],
    )
    await send_transaction(config, transaction)


async def command_increase_validator_stake(
    config: Config, stake_pool_address: Pubkey, vote_account: Pubkey, amount: float,
):
    lamports = positive_lamports(amount)
    await maybe_update(config, stake_pool_address)

    stake_pool, validator_stake_info = await find_validator(config, stake_pool_address, vote_account)
    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.increase_validator_stake_with_vote(
                STAKE_POOL_PROGRAM_ID,
                stake_pool,
                stake_pool_address,
                vote_account,
                lamports,
                validator_seed(validator_stake_info),
                validator_stake_info.transient_seed_suffix,
            )
        ],
        [config.fee_payer, config.staker],
    )
    await send_transaction(config, transaction)


async def command_decrease_validator_stake(
    config: Config, stake_pool_address: Pubkey, vote_account: Pubkey, amount: float,
):
    lamports = positive_lamports(amount)
    await maybe_update(config, stake_pool_address)

    stake_pool, validator_stake_info = await find_validator(config, stake_pool_address, vote_account)
    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.decrease_validator_stake_with_vote(
                STAKE_POOL_PROGRAM_ID,
                stake_pool,
                stake_pool_address,
                vote_account,
                lamports,
                validator_seed(validator_stake_info),
                validator_stake_info.transient_seed_suffix,
            )
        ],
        [config.fee_payer, config.staker],
    )
    await send_transaction(config, transaction)
