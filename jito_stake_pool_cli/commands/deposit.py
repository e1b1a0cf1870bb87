"""Deposits of SOL and of delegated stake accounts in exchange for pool tokens."""

from typing import List, Optional

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
import solders.system_program as sys

from jito_stake_pool.constants import STAKE_POOL_PROGRAM_ID, find_deposit_authority_program_address
from jito_stake_pool.constants import find_stake_program_address, find_withdraw_authority_program_address
import jito_stake_pool.instructions as sp
from stake.state import StakeAuthorize, StakeStakeType
import stake.instructions as st
from spl_token.actions import add_associated_token_account
from jito_stake_pool_cli.client import get_balance, get_stake_pool, get_stake_state, get_validator_list
from jito_stake_pool_cli.commands.update import maybe_update
from jito_stake_pool_cli.config import Config
from jito_stake_pool_cli.errors import InsufficientFundsError, StakePoolCliError
from jito_stake_pool_cli.output import format_sol, positive_lamports
from jito_stake_pool_cli.transaction import checked_transaction_with_signers, send_transaction


async def command_deposit_sol(
    config: Config,
    stake_pool_address: Pubkey,
    amount: float,
    from_keypair: Optional[Keypair] = None,
    pool_token_receiver_account: Optional[Pubkey] = None,
    referrer_token_account: Optional[Pubkey] = None,
):
    """Deposits SOL into the pool reserve, minting pool tokens to the receiver.

    The SOL goes through a fresh ephemeral account, so the funding source never
    appears as the program's funding account.
    """
    lamports = positive_lamports(amount)
    await maybe_update(config, stake_pool_address)

    from_pubkey = from_keypair.pubkey() if from_keypair else config.fee_payer.pubkey()
    from_balance = await get_balance(config.client, from_pubkey)
    if from_balance < lamports:
        raise InsufficientFundsError(
            f"Not enough SOL to deposit into pool: {format_sol(lamports)}.\n"
            f"Maximum deposit amount is {format_sol(from_balance)} SOL."
        )

    stake_pool = await get_stake_pool(config.client, stake_pool_address)

    user_sol_transfer = Keypair()
    signers = [config.fee_payer, user_sol_transfer]
    if from_keypair:
        signers.append(from_keypair)

    instructions: List[Instruction] = [
        sys.transfer(
            sys.TransferParams(
                from_pubkey=from_pubkey,
                to_pubkey=user_sol_transfer.pubkey(),
                lamports=lamports,
            )
        )
    ]

    rent_free_balances = 0
    if pool_token_receiver_account is None:
        (pool_token_receiver_account, rent_free_balances) = await add_associated_token_account(
            config.client,
            config.fee_payer.pubkey(),
            config.token_owner.pubkey(),
            stake_pool.pool_mint,
            instructions,
        )
    referrer_token_account = referrer_token_account or pool_token_receiver_account

    deposit_authority = None
    if config.funding_authority:
        expected_sol_deposit_authority = stake_pool.sol_deposit_authority
        if expected_sol_deposit_authority is None:
            raise StakePoolCliError("SOL deposit authority specified in arguments but stake pool has none")
        if config.funding_authority.pubkey() != expected_sol_deposit_authority:
            raise StakePoolCliError(
                f"Invalid deposit authority specified, expected {expected_sol_deposit_authority}, "
                f"received {config.funding_authority.pubkey()}"
            )
        deposit_authority = config.funding_authority.pubkey()
        signers.append(config.funding_authority)

    (withdraw_authority, _seed) = find_withdraw_authority_program_address(STAKE_POOL_PROGRAM_ID, stake_pool_address)
    instructions.append(
        sp.deposit_sol(
            sp.DepositSolParams(
                program_id=STAKE_POOL_PROGRAM_ID,
                stake_pool=stake_pool_address,
                withdraw_authority=withdraw_authority,
                reserve_stake=stake_pool.reserve_stake,
                funding_account=user_sol_transfer.pubkey(),
                destination_pool_account=pool_token_receiver_account,
                manager_fee_account=stake_pool.manager_fee_account,
                referral_pool_account=referrer_token_account,
                pool_mint=stake_pool.pool_mint,
                token_program_id=stake_pool.token_program_id,
                amount=lamports,
                deposit_authority=deposit_authority,
            )
        )
    )
    transaction = await checked_transaction_with_signers(config, instructions, signers, rent_free_balances)
    await send_transaction(config, transaction)


async def command_deposit_stake(
    config: Config,
    stake_pool_address: Pubkey,
    stake: Pubkey,
    withdraw_authority: Keypair,
    pool_token_receiver_account: Optional[Pubkey] = None,
    referrer_token_account: Optional[Pubkey] = None,
):
    """Deposits a delegated stake account, merging it into the pool's stake for its validator."""
    await maybe_update(config, stake_pool_address)

    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    stake_state = await get_stake_state(config.client, stake)
    if config.verbose:
        print(f"Depositing stake account {stake_state}")
    if stake_state.state_type != StakeStakeType.STAKE or stake_state.delegation is None:
        raise StakePoolCliError("Wrong stake account state, must be delegated to validator")
    vote_account = stake_state.delegation.voter_pubkey

    validator_list = await get_validator_list(config.client, stake_pool.validator_list)
    validator_stake_info = validator_list.find(vote_account)
    if validator_stake_info is None:
        raise StakePoolCliError("Vote account not found in the stake pool")
    (validator_stake_account, _seed) = find_stake_program_address(
        STAKE_POOL_PROGRAM_ID,
        vote_account,
        stake_pool_address,
        validator_stake_info.validator_seed_suffix or None,
    )
    validator_stake_state = await get_stake_state(config.client, validator_stake_account)
    print(f"Depositing stake {stake} into stake pool account {validator_stake_account}")
    if config.verbose:
        print(validator_stake_state)

    instructions: List[Instruction] = []
    signers = [config.fee_payer, withdraw_authority]

    rent_free_balances = 0
    if pool_token_receiver_account is None:
        (pool_token_receiver_account, rent_free_balances) = await add_associated_token_account(
            config.client,
            config.fee_payer.pubkey(),
            config.token_owner.pubkey(),
            stake_pool.pool_mint,
            instructions,
        )
    referrer_token_account = referrer_token_account or pool_token_receiver_account

    if config.funding_authority:
        if config.funding_authority.pubkey() != stake_pool.stake_deposit_authority:
            raise StakePoolCliError(
                f"Invalid deposit authority specified, expected {stake_pool.stake_deposit_authority}, "
                f"received {config.funding_authority.pubkey()}"
            )
        deposit_authority = config.funding_authority.pubkey()
        signers.append(config.funding_authority)
    else:
        (deposit_authority, _seed) = find_deposit_authority_program_address(
            STAKE_POOL_PROGRAM_ID, stake_pool_address)

    for stake_authorize in (StakeAuthorize.STAKER, StakeAuthorize.WITHDRAWER):
        instructions.append(
            st.authorize(
                st.AuthorizeParams(
                    stake=stake,
                    authority=withdraw_authority.pubkey(),
                    new_authority=deposit_authority,
                    stake_authorize=stake_authorize,
                )
            )
        )

    (pool_withdraw_authority, _seed) = find_withdraw_authority_program_address(
        STAKE_POOL_PROGRAM_ID, stake_pool_address)
    instructions.append(
        sp.deposit_stake(
            sp.DepositStakeParams(
                program_id=STAKE_POOL_PROGRAM_ID,
                stake_pool=stake_pool_address,
                validator_list=stake_pool.validator_list,
                deposit_authority=deposit_authority,
                withdraw_authority=pool_withdraw_authority,
                deposit_stake=stake,
                validator_stake=validator_stake_account,
                reserve_stake=stake_pool.reserve_stake,
                destination_pool_account=pool_token_receiver_account,
                manager_fee_account=stake_pool.manager_fee_account,
                referral_pool_account=referrer_token_account,
                pool_mint=stake_pool.pool_mint,
                token_program_id=stake_pool.token_program_id,
                deposit_authority_is_signer=config.funding_authority is not None,
            )
        )
    )
    transaction = await checked_transaction_with_signers(config, instructions, signers, rent_free_balances)
    await send_transaction(config, transaction)
