"""Pool creation and inspection commands."""

from typing import List, Optional

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
import solders.system_program as sys

from spl.token.constants import TOKEN_PROGRAM_ID

from jito_stake_pool.constants import MINIMUM_RESERVE_LAMPORTS, STAKE_POOL_PROGRAM_ID
from jito_stake_pool.constants import find_withdraw_authority_program_address
from jito_stake_pool.state import STAKE_POOL_LAYOUT, Fee, ValidatorList
import jito_stake_pool.instructions as sp
from stake.constants import STAKE_LEN, STAKE_PROGRAM_ID
from stake.state import Authorized, Lockup
import stake.instructions as st
from spl_token.actions import add_associated_token_account, create_mint
from jito_stake_pool_cli.client import get_stake_pool, get_validator_list
from jito_stake_pool_cli.config import Config
from jito_stake_pool_cli.errors import StakePoolCliError
from jito_stake_pool_cli.output import print_json, print_stake_pool, stake_pool_as_dict
from jito_stake_pool_cli.transaction import check_fee_payer_balance, get_fee_for_message
from jito_stake_pool_cli.transaction import get_latest_blockhash, send_transaction, sign_message

FEES_REFERENCE = (
    "Consider setting a minimal fee. "
    "See https://spl.solana.com/stake-pool/fees for more "
    "information about fees and best practices. If you are "
    "aware of the possible risks of a stake pool with no fees, "
    "you may force pool creation with the --unsafe-fees flag."
)


def check_stake_pool_fees(epoch_fee: Fee, withdrawal_fee: Fee, deposit_fee: Fee):
    if epoch_fee.is_zero():
        raise StakePoolCliError(f"Epoch fee should not be 0. {FEES_REFERENCE}")
    if withdrawal_fee.is_zero() and deposit_fee.is_zero():
        raise StakePoolCliError(f"Withdrawal and deposit fee should not both be 0. {FEES_REFERENCE}")


async def minimum_balance(config: Config, size: int) -> int:
    resp = await config.client.get_minimum_balance_for_rent_exemption(size)
    return resp.value


async def command_create_pool(
    config: Config,
    deposit_authority: Optional[Keypair],
    epoch_fee: Fee,
    withdrawal_fee: Fee,
    deposit_fee: Fee,
    referral_fee: int,
    max_validators: int,
    stake_pool_keypair: Optional[Keypair] = None,
    validator_list_keypair: Optional[Keypair] = None,
    mint_keypair: Optional[Keypair] = None,
    reserve_keypair: Optional[Keypair] = None,
    unsafe_fees: bool = False,
):
    """Creates a new stake pool with its reserve, pool token mint and manager fee account.

    The setup accounts go out in a first transaction, the validator list, pool account
    and `Initialize` instruction in a second one. The fee payer must cover the rent of
    every new account plus both transaction fees before anything is sent.
    """
    if not unsafe_fees:
        check_stake_pool_fees(epoch_fee, withdrawal_fee, deposit_fee)
    if referral_fee > 100:
        raise StakePoolCliError(f"Invalid referral fee {referral_fee}%. Fee needs to be in range [0-100]")

    reserve_keypair = reserve_keypair or Keypair()
    print(f"Creating reserve stake {reserve_keypair.pubkey()}")
    mint_keypair = mint_keypair or Keypair()
    stake_pool_keypair = stake_pool_keypair or Keypair()
    validator_list_keypair = validator_list_keypair or Keypair()
    fee_payer = config.fee_payer.pubkey()

    reserve_stake_balance = await minimum_balance(config, STAKE_LEN) + MINIMUM_RESERVE_LAMPORTS + 1
    stake_pool_size = STAKE_POOL_LAYOUT.sizeof()
    stake_pool_account_lamports = await minimum_balance(config, stake_pool_size)
    validator_list_size = ValidatorList.calculate_validator_list_size(max_validators)
    validator_list_balance = await minimum_balance(config, validator_list_size)

    (withdraw_authority, _seed) = find_withdraw_authority_program_address(
        STAKE_POOL_PROGRAM_ID, stake_pool_keypair.pubkey())
    if config.verbose:
        print(f"Stake pool withdraw authority {withdraw_authority}")

    instructions: List[Instruction] = [
        sys.create_account(
            sys.CreateAccountParams(
                from_pubkey=fee_payer,
                to_pubkey=reserve_keypair.pubkey(),
                lamports=reserve_stake_balance,
                space=STAKE_LEN,
                owner=STAKE_PROGRAM_ID,
            )
        ),
        st.initialize(
            st.InitializeParams(
                stake=reserve_keypair.pubkey(),
                authorized=Authorized(
                    staker=withdraw_authority,
                    withdrawer=withdraw_authority,
                ),
                lockup=Lockup.default(),
            )
        ),
    ]
    mint_account_balance = await create_mint(
        config.client, fee_payer, mint_keypair.pubkey(), withdraw_authority, instructions)
    (pool_fee_account, pool_fee_account_balance) = await add_associated_token_account(
        config.client, fee_payer, config.manager.pubkey(), mint_keypair.pubkey(), instructions)
    print(f"Creating pool fee collection account {pool_fee_account}")

    total_rent_free_balances = (
        reserve_stake_balance
        + mint_account_balance
        + pool_fee_account_balance
        + stake_pool_account_lamports
        + validator_list_balance
    )

    recent_blockhash = await get_latest_blockhash(config)
    setup_message = Message.new_with_blockhash(instructions, fee_payer, recent_blockhash)
    initialize_message = Message.new_with_blockhash(
        [
            sys.create_account(
                sys.CreateAccountParams(
                    from_pubkey=fee_payer,
                    to_pubkey=validator_list_keypair.pubkey(),
                    lamports=validator_list_balance,
                    space=validator_list_size,
                    owner=STAKE_POOL_PROGRAM_ID,
                )
            ),
            sys.create_account(
                sys.CreateAccountParams(
                    from_pubkey=fee_payer,
                    to_pubkey=stake_pool_keypair.pubkey(),
                    lamports=stake_pool_account_lamports,
                    space=stake_pool_size,
                    owner=STAKE_POOL_PROGRAM_ID,
                )
            ),
            sp.initialize(
                sp.InitializeParams(
                    program_id=STAKE_POOL_PROGRAM_ID,
                    stake_pool=stake_pool_keypair.pubkey(),
                    manager=config.manager.pubkey(),
                    staker=config.staker.pubkey(),
                    withdraw_authority=withdraw_authority,
                    validator_list=validator_list_keypair.pubkey(),
                    reserve_stake=reserve_keypair.pubkey(),
                    pool_mint=mint_keypair.pubkey(),
                    manager_fee_account=pool_fee_account,
                    token_program_id=TOKEN_PROGRAM_ID,
                    epoch_fee=epoch_fee,
                    withdrawal_fee=withdrawal_fee,
                    deposit_fee=deposit_fee,
                    referral_fee=referral_fee,
                    max_validators=max_validators,
                    deposit_authority=deposit_authority.pubkey() if deposit_authority else None,
                )
            ),
        ],
        fee_payer,
        recent_blockhash,
    )
    await check_fee_payer_balance(
        config,
        total_rent_free_balances
        + await get_fee_for_message(config, setup_message)
        + await get_fee_for_message(config, initialize_message),
    )

    setup_transaction = sign_message(setup_message, [config.fee_payer, mint_keypair, reserve_keypair])
    initialize_signers = [config.fee_payer, stake_pool_keypair, validator_list_keypair, config.manager]
    if deposit_authority:
        print(f"Deposits will be restricted to {deposit_authority.pubkey()} only, "
              "this can be changed using the set-funding-authority command.")
        initialize_signers.append(deposit_authority)
    initialize_transaction = sign_message(initialize_message, initialize_signers)

    await send_transaction(config, setup_transaction)
    print(f"Creating stake pool {stake_pool_keypair.pubkey()} "
          f"with validator list {validator_list_keypair.pubkey()}")
    await send_transaction(config, initialize_transaction)


async def command_list(config: Config, stake_pool_address: Pubkey):
    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    validator_list = await get_validator_list(config.client, stake_pool.validator_list)
    (withdraw_authority, _seed) = find_withdraw_authority_program_address(
        STAKE_POOL_PROGRAM_ID, stake_pool_address)

    if config.output_format in ('json', 'json-compact'):
        print_json(
            stake_pool_as_dict(stake_pool_address, stake_pool, validator_list, withdraw_authority),
            compact=config.output_format == 'json-compact',
        )
    else:
        print_stake_pool(stake_pool_address, stake_pool, validator_list, withdraw_authority, config.verbose)
