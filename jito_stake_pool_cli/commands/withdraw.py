"""Withdrawals of SOL or stake accounts by burning pool tokens."""

from typing import List, Optional, Tuple

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
import solders.system_program as sys
import spl.token.instructions as spl_token

from jito_stake_pool.constants import MINIMUM_ACTIVE_STAKE, STAKE_POOL_PROGRAM_ID
from jito_stake_pool.constants import find_stake_program_address, find_withdraw_authority_program_address
from jito_stake_pool.state import StakePool, StakeStatus, ValidatorList
import jito_stake_pool.instructions as sp
from stake.constants import STAKE_LEN, STAKE_PROGRAM_ID, lamports_to_sol
from jito_stake_pool_cli.client import get_stake_pool, get_token_account, get_validator_list
from jito_stake_pool_cli.commands.update import maybe_update
from jito_stake_pool_cli.config import Config
from jito_stake_pool_cli.errors import InsufficientFundsError, StakePoolCliError
from jito_stake_pool_cli.output import positive_lamports
from jito_stake_pool_cli.transaction import checked_transaction_with_signers, send_transaction


async def check_pool_token_balance(
    config: Config, stake_pool: StakePool, pool_token_account: Optional[Pubkey], pool_amount: int,
) -> Pubkey:
    """Returns the account to burn pool tokens from, checking it holds at least `pool_amount`."""
    pool_token_account = pool_token_account or spl_token.get_associated_token_address(
        config.token_owner.pubkey(), stake_pool.pool_mint)
    token_account = await get_token_account(config.client, pool_token_account, stake_pool.pool_mint)
    if token_account.amount < pool_amount:
        raise InsufficientFundsError(
            f"Not enough token balance to withdraw {lamports_to_sol(pool_amount)} pool tokens.\n"
            f"Maximum withdraw amount is {lamports_to_sol(token_account.amount)} pool tokens."
        )
    return pool_token_account


async def new_stake_account(
    config: Config, instructions: List[Instruction], signers: List[Keypair],
) -> Tuple[Pubkey, int]:
    """Appends the creation of an empty stake account to receive withdrawn stake."""
    stake_receiver = Keypair()
    resp = await config.client.get_minimum_balance_for_rent_exemption(STAKE_LEN)
    print(f"Creating account to receive stake {stake_receiver.pubkey()}")
    instructions.append(
        sys.create_account(
            sys.CreateAccountParams(
                from_pubkey=config.fee_payer.pubkey(),
                to_pubkey=stake_receiver.pubkey(),
                lamports=resp.value,
                space=STAKE_LEN,
                owner=STAKE_PROGRAM_ID,
            )
        )
    )
    signers.append(stake_receiver)
    return stake_receiver.pubkey(), resp.value


def select_withdraw_source(
    stake_pool: StakePool,
    stake_pool_address: Pubkey,
    validator_list: ValidatorList,
    vote_account: Optional[Pubkey],
    use_reserve: bool,
) -> Pubkey:
    """Picks the stake account to split the withdrawal from.

    Without an explicit choice, the active validator with the most stake above the
    minimum delegation is used.
    """
    if use_reserve:
        return stake_pool.reserve_stake

    if vote_account is not None:
        validator_stake_info = validator_list.find(vote_account)
        if validator_stake_info is None:
            raise StakePoolCliError(
                f"Provided vote account address {vote_account} does not exist in the stake pool.")
    else:
        active_validators = [
            validator for validator in validator_list.validators
            if validator.status == StakeStatus.ACTIVE and validator.active_stake_lamports > MINIMUM_ACTIVE_STAKE
        ]
        if not active_validators:
            raise StakePoolCliError("No active stake accounts found in this pool, use --use-reserve")
        validator_stake_info = max(active_validators, key=lambda validator: validator.active_stake_lamports)

    (validator_stake, _seed) = find_stake_program_address(
        STAKE_POOL_PROGRAM_ID,
        validator_stake_info.vote_account_address,
        stake_pool_address,
        validator_stake_info.validator_seed_suffix or None,
    )
    return validator_stake


async def command_withdraw_stake(
    config: Config,
    stake_pool_address: Pubkey,
    amount: float,
    pool_token_account: Optional[Pubkey] = None,
    vote_account: Optional[Pubkey] = None,
    use_reserve: bool = False,
    stake_receiver: Optional[Pubkey] = None,
):
    """Burns `amount` pool tokens in exchange for a stake account split from the pool."""
    pool_amount = positive_lamports(amount)
    await maybe_update(config, stake_pool_address)

    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    validator_list = await get_validator_list(config.client, stake_pool.validator_list)
    pool_token_account = await check_pool_token_balance(config, stake_pool, pool_token_account, pool_amount)
    source_stake = select_withdraw_source(stake_pool, stake_pool_address, validator_list, vote_account, use_reserve)
    print(f"Withdrawing {amount} pool tokens from stake account {source_stake}")

    instructions: List[Instruction] = []
    signers = [config.fee_payer, config.token_owner]
    rent_free_balances = 0
    if stake_receiver is None:
        (stake_receiver, rent_free_balances) = await new_stake_account(config, instructions, signers)

    (withdraw_authority, _seed) = find_withdraw_authority_program_address(STAKE_POOL_PROGRAM_ID, stake_pool_address)
    instructions.append(
        sp.withdraw_stake(
            sp.WithdrawStakeParams(
                program_id=STAKE_POOL_PROGRAM_ID,
                stake_pool=stake_pool_address,
                validator_list=stake_pool.validator_list,
                withdraw_authority=withdraw_authority,
                validator_stake=source_stake,
                destination_stake=stake_receiver,
                destination_stake_authority=config.token_owner.pubkey(),
                source_transfer_authority=config.token_owner.pubkey(),
                source_pool_account=pool_token_account,
                manager_fee_account=stake_pool.manager_fee_account,
                pool_mint=stake_pool.pool_mint,
                token_program_id=stake_pool.token_program_id,
                amount=pool_amount,
            )
        )
    )
    transaction = await checked_transaction_with_signers(config, instructions, signers, rent_free_balances)
    await send_transaction(config, transaction)


async def command_withdraw_sol(
    config: Config,
    stake_pool_address: Pubkey,
    sol_receiver: Pubkey,
    amount: float,
    pool_token_account: Optional[Pubkey] = None,
):
    """Burns `amount` pool tokens in exchange for SOL taken from the pool reserve."""
    pool_amount = positive_lamports(amount)
    await maybe_update(config, stake_pool_address)

    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    pool_token_account = await check_pool_token_balance(config, stake_pool, pool_token_account, pool_amount)

    signers = [config.fee_payer, config.token_owner]
    sol_withdraw_authority = None
    if config.funding_authority:
        expected_sol_withdraw_authority = stake_pool.sol_withdraw_authority
        if expected_sol_withdraw_authority is None:
            raise StakePoolCliError("SOL withdraw authority specified in arguments but stake pool has none")
        if config.funding_authority.pubkey() != expected_sol_withdraw_authority:
            raise StakePoolCliError(
                f"Invalid withdraw authority specified, expected {expected_sol_withdraw_authority}, "
                f"received {config.funding_authority.pubkey()}"
            )
        sol_withdraw_authority = config.funding_authority.pubkey()
        signers.append(config.funding_authority)

    (withdraw_authority, _seed) = find_withdraw_authority_program_address(STAKE_POOL_PROGRAM_ID, stake_pool_address)
    instruction = sp.withdraw_sol(
        sp.WithdrawSolParams(
            program_id=STAKE_POOL_PROGRAM_ID,
            stake_pool=stake_pool_address,
            withdraw_authority=withdraw_authority,
            source_transfer_authority=config.token_owner.pubkey(),
            source_pool_account=pool_token_account,
            reserve_stake=stake_pool.reserve_stake,
            destination_system_account=sol_receiver,
            manager_fee_account=stake_pool.manager_fee_account,
            pool_mint=stake_pool.pool_mint,
            token_program_id=stake_pool.token_program_id,
            amount=pool_amount,
            sol_withdraw_authority=sol_withdraw_authority,
        )
    )
    transaction = await checked_transaction_with_signers(config, [instruction], signers)
    await send_transaction(config, transaction)
