"""Manager and staker commands changing pool authorities, fees and preferred validators."""

from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from jito_stake_pool.constants import STAKE_POOL_PROGRAM_ID
from jito_stake_pool.state import Fee
import jito_stake_pool.instructions as sp
from jito_stake_pool.instructions import FeeType, FundingType, PreferredValidatorType
from jito_stake_pool_cli.client import get_stake_pool, get_token_account
from jito_stake_pool_cli.config import Config
from jito_stake_pool_cli.errors import StakePoolCliError
from jito_stake_pool_cli.transaction import checked_transaction_with_signers, send_transaction


async def command_set_manager(
    config: Config,
    stake_pool_address: Pubkey,
    new_manager: Optional[Keypair] = None,
    new_fee_receiver: Optional[Pubkey] = None,
):
    """Changes the pool manager and/or the account receiving manager fees.

    Whichever of the two is not given keeps its current value.
    """
    if new_manager is None and new_fee_receiver is None:
        raise StakePoolCliError("At least one of --new-manager or --new-fee-receiver must be provided")
    stake_pool = await get_stake_pool(config.client, stake_pool_address)

    if new_fee_receiver is not None:
        # The program rejects fee accounts of another mint, fail before paying for it.
        await get_token_account(config.client, new_fee_receiver, stake_pool.pool_mint)
    else:
        new_fee_receiver = stake_pool.manager_fee_account

    signers = [config.fee_payer, config.manager]
    if new_manager is not None:
        signers.append(new_manager)
        new_manager_pubkey = new_manager.pubkey()
    else:
        new_manager_pubkey = config.manager.pubkey()

    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.set_manager(
                sp.SetManagerParams(
                    program_id=STAKE_POOL_PROGRAM_ID,
                    stake_pool=stake_pool_address,
                    manager=config.manager.pubkey(),
                    new_manager=new_manager_pubkey,
                    new_fee_receiver=new_fee_receiver,
                )
            )
        ],
        signers,
    )
    await send_transaction(config, transaction)


async def command_set_staker(config: Config, stake_pool_address: Pubkey, new_staker: Pubkey):
    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.set_staker(
                sp.SetStakerParams(
                    program_id=STAKE_POOL_PROGRAM_ID,
                    stake_pool=stake_pool_address,
                    authority=config.manager.pubkey(),
                    new_staker=new_staker,
                )
            )
        ],
        [config.fee_payer, config.manager],
    )
    await send_transaction(config, transaction)


async def command_set_funding_authority(
    config: Config,
    stake_pool_address: Pubkey,
    funding_type: FundingType,
    new_authority: Optional[Pubkey] = None,
):
    """Sets or, when `new_authority` is None, removes one of the pool's funding authorities."""
    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.set_funding_authority(
                sp.SetFundingAuthorityParams(
                    program_id=STAKE_POOL_PROGRAM_ID,
                    stake_pool=stake_pool_address,
                    manager=config.manager.pubkey(),
                    funding_type=funding_type,
                    new_authority=new_authority,
                )
            )
        ],
        [config.fee_payer, config.manager],
    )
    await send_transaction(config, transaction)


async def command_set_fee(config: Config, stake_pool_address: Pubkey, fee_type: FeeType, fee: Fee):
    if fee.denominator == 0 and fee.numerator != 0:
        raise StakePoolCliError(f"Invalid fee {fee}, denominator must not be 0")
    if fee.numerator > fee.denominator and fee.denominator != 0:
        raise StakePoolCliError(f"Invalid fee {fee}, must not exceed 100%")
    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.set_fee(
                sp.SetFeeParams(
                    program_id=STAKE_POOL_PROGRAM_ID,
                    stake_pool=stake_pool_address,
                    manager=config.manager.pubkey(),
                    fee_type=fee_type,
                    fee=fee,
                )
            )
        ],
        [config.fee_payer, config.manager],
    )
    await send_transaction(config, transaction)


async def command_set_referral_fee(config: Config, stake_pool_address: Pubkey, fee_type: FeeType, fee: int):
    if not fee_type.is_referral():
        raise StakePoolCliError(f"{fee_type.name} is not a referral fee")
    if fee < 0 or fee > 100:
        raise StakePoolCliError(f"Invalid fee {fee}%. Fee needs to be in range [0-100]")
    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.set_fee(
                sp.SetFeeParams(
                    program_id=STAKE_POOL_PROGRAM_ID,
                    stake_pool=stake_pool_address,
                    manager=config.manager.pubkey(),
                    fee_type=fee_type,
                    fee=fee,
                )
            )
        ],
        [config.fee_payer, config.manager],
    )
    await send_transaction(config, transaction)


async def command_set_preferred_validator(
    config: Config,
    stake_pool_address: Pubkey,
    validator_type: PreferredValidatorType,
    vote_account: Optional[Pubkey] = None,
):
    """Sets the preferred deposit or withdraw validator, or clears it when `vote_account` is None."""
    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    transaction = await checked_transaction_with_signers(
        config,
        [
            sp.set_preferred_validator(
                sp.SetPreferredValidatorParams(
                    program_id=STAKE_POOL_PROGRAM_ID,
                    stake_pool=stake_pool_address,
                    staker=config.staker.pubkey(),
                    validator_list=stake_pool.validator_list,
                    validator_type=validator_type,
                    validator_vote_address=vote_account,
                )
            )
        ],
        [config.fee_payer, config.staker],
    )
    await send_transaction(config, transaction)
