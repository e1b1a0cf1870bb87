"""Jito Stake Pool Instructions."""

from enum import IntEnum
from typing import List, NamedTuple, Optional, Tuple, Union
from construct import Struct, Switch, Int8ul, Int32ul, Int64ul, Pass  # type: ignore

from solana.constants import SYSTEM_PROGRAM_ID
from solders.pubkey import Pubkey
from solders.instruction import AccountMeta, Instruction
from solders.sysvar import CLOCK, RENT, STAKE_HISTORY

from stake.constants import STAKE_PROGRAM_ID, SYSVAR_STAKE_CONFIG_ID
from jito_stake_pool.constants import MAX_VALIDATORS_TO_UPDATE
from jito_stake_pool.constants import find_stake_program_address, find_transient_stake_program_address
from jito_stake_pool.constants import find_withdraw_authority_program_address
from jito_stake_pool.state import Fee, FEE_LAYOUT, PUBLIC_KEY_LAYOUT, StakePool, ValidatorList


class PreferredValidatorType(IntEnum):
    """Specifies the validator type for SetPreferredValidator instruction."""

    DEPOSIT = 0
    """Specifies the preferred deposit validator."""
    WITHDRAW = 1
    """Specifies the preferred withdraw validator."""


class FundingType(IntEnum):
    """Defines which authority to update in the `SetFundingAuthority` instruction."""

    STAKE_DEPOSIT = 0
    """Sets the stake deposit authority."""
    SOL_DEPOSIT = 1
    """Sets the SOL deposit authority."""
    SOL_WITHDRAW = 2
    """Sets the SOL withdraw authority."""


class FeeType(IntEnum):
    """Defines which fee to update in the `SetFee` instruction."""

    SOL_REFERRAL = 0
    """Referral fee for SOL deposits, as a percentage."""
    STAKE_REFERRAL = 1
    """Referral fee for stake deposits, as a percentage."""
    EPOCH = 2
    """Management fee paid per epoch."""
    STAKE_WITHDRAWAL = 3
    """Stake withdrawal fee."""
    SOL_DEPOSIT = 4
    """Deposit fee for SOL deposits."""
    STAKE_DEPOSIT = 5
    """Deposit fee for stake deposits."""
    SOL_WITHDRAWAL = 6
    """SOL withdrawal fee."""

    def is_referral(self) -> bool:
        return self in (FeeType.SOL_REFERRAL, FeeType.STAKE_REFERRAL)


class InitializeParams(NamedTuple):
    """Initialize stake pool transaction params."""

    # Accounts
    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """[w] Stake Pool account to initialize."""
    manager: Pubkey
    """[s] Manager for new stake pool."""
    staker: Pubkey
    """[] Staker for the new stake pool."""
    withdraw_authority: Pubkey
    """[] Withdraw authority for the new stake pool."""
    validator_list: Pubkey
    """[w] Uninitialized validator list account for the new stake pool."""
    reserve_stake: Pubkey
    """[] Reserve stake account."""
    pool_mint: Pubkey
    """[w] Pool token mint account."""
    manager_fee_account: Pubkey
    """[w] Manager's fee account"""
    token_program_id: Pubkey
    """[] SPL Token program id."""

    # Params
    epoch_fee: Fee
    """Fee assessed as percentage of rewards."""
    withdrawal_fee: Fee
    """Fee charged per withdrawal."""
    deposit_fee: Fee
    """Fee charged per deposit."""
    referral_fee: int
    """Percentage [0-100] of deposit fee that goes to referrer."""
    max_validators: int
    """Maximum number of possible validators in the pool."""

    # Optional
    deposit_authority: Optional[Pubkey] = None
    """[s] Optional deposit authority that must sign all deposits."""


class AddValidatorToPoolParams(NamedTuple):
    """(Staker only) Adds stake account delegated to validator to the pool's list of managed validators.

    The validator stake account is created at its unseeded address and funded by `funder`.
    """

    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    staker: Pubkey
    """`[s]` Staker."""
    funder: Pubkey
    """`[ws]` Funding account for the new validator stake account."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account."""
    validator_stake: Pubkey
    """`[w]` Stake account to add to the pool."""
    validator_vote: Pubkey
    """`[]` Validator this stake account will be delegated to."""


class RemoveValidatorFromPoolParams(NamedTuple):
    """(Staker only) Removes validator from the pool."""

    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    staker: Pubkey
    """`[s]` Staker."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account."""
    validator_stake: Pubkey
    """`[w]` Stake account to remove from the pool."""
    transient_stake: Pubkey
    """`[w]` Transient stake account, to deactivate if necessary."""


class IncreaseValidatorStakeParams(NamedTuple):
    """(Staker only) Increase stake on a validator from the reserve account."""

    # Accounts
    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[]` Stake pool."""
    staker: Pubkey
    """`[s]` Staker."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account."""
    reserve_stake: Pubkey
    """`[w]` Stake pool's reserve."""
    transient_stake: Pubkey
    """`[w]` Transient stake account to receive split."""
    validator_stake: Pubkey
    """`[]` Canonical stake account to check."""
    validator_vote: Pubkey
    """`[]` Validator vote account to delegate to."""

    # Params
    lamports: int
    """Amount of lamports to split into the transient stake account."""
    transient_stake_seed: int
    """Seed to used to create the transient stake account."""


class DecreaseValidatorStakeWithReserveParams(NamedTuple):
    """(Staker only) Decrease active stake on a validator, eventually moving it to the reserve"""

    # Accounts
    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[]` Stake pool."""
    staker: Pubkey
    """`[s]` Staker."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account."""
    reserve_stake: Pubkey
    """`[w]` Stake pool's reserve."""
    validator_stake: Pubkey
    """`[w]` Canonical stake to split from."""
    transient_stake: Pubkey
    """`[w]` Transient stake account to receive split."""

    # Params
    lamports: int
    """Amount of lamports to split into the transient stake account."""
    transient_stake_seed: int
    """Seed to used to create the transient stake account."""


class SetPreferredValidatorParams(NamedTuple):
    """(Staker only) Set the preferred deposit or withdraw validator."""

    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    staker: Pubkey
    """`[s]` Staker."""
    validator_list: Pubkey
    """`[]` Validator list."""

    # Params
    validator_type: PreferredValidatorType
    """Affected operation (deposit or withdraw)."""
    validator_vote_address: Optional[Pubkey]
    """Validator vote account that deposits or withdraws must go through, `None` to unset."""


class UpdateValidatorListBalanceParams(NamedTuple):
    """Updates balances of validator and transient stake accounts in the pool."""

    # Accounts
    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[]` Stake pool."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account."""
    reserve_stake: Pubkey
    """`[w]` Stake pool's reserve."""
    validator_and_transient_stake_pairs: List[Pubkey]
    """[] N pairs of validator and transient stake accounts"""

    # Params
    start_index: int
    """Index to start updating on the validator list."""
    no_merge: bool
    """If true, don't try merging transient stake accounts."""


class UpdateStakePoolBalanceParams(NamedTuple):
    """Updates total pool balance based on balances in the reserve and validator list."""

    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account."""
    reserve_stake: Pubkey
    """`[w]` Stake pool's reserve."""
    manager_fee_account: Pubkey
    """`[w]` Account to receive pool fee tokens."""
    pool_mint: Pubkey
    """`[w]` Pool mint account."""
    token_program_id: Pubkey
    """`[]` Pool token program."""


class CleanupRemovedValidatorEntriesParams(NamedTuple):
    """Cleans up validator stake account entries marked as `ReadyForRemoval`"""

    program_id: Pubkey
    stake_pool: Pubkey
    validator_list: Pubkey


class DepositStakeParams(NamedTuple):
    """Deposits a stake account into the pool in exchange for pool tokens"""

    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool"""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account"""
    deposit_authority: Pubkey
    """`[s]/[]` Stake pool deposit authority"""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority"""
    deposit_stake: Pubkey
    """`[w]` Stake account to join the pool (stake's withdraw authority set to the stake pool deposit authority)"""
    validator_stake: Pubkey
    """`[w]` Validator stake account for the stake account to be merged with"""
    reserve_stake: Pubkey
    """`[w]` Reserve stake account, to withdraw rent exempt reserve"""
    destination_pool_account: Pubkey
    """`[w]` User account to receive pool tokens"""
    manager_fee_account: Pubkey
    """`[w]` Account to receive pool fee tokens"""
    referral_pool_account: Pubkey
    """`[w]` Account to receive a portion of pool fee tokens as referral fees"""
    pool_mint: Pubkey
    """`[w]` Pool token mint account"""
    token_program_id: Pubkey
    """`[]` Pool token program id"""

    # Optional
    deposit_authority_is_signer: bool = False
    """Set when the pool uses a custom stake deposit authority."""


class WithdrawStakeParams(NamedTuple):
    """Withdraws a stake account from the pool in exchange for pool tokens"""

    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool"""
    validator_list: Pubkey
    """`[w]` Validator stake list storage account"""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority"""
    validator_stake: Pubkey
    """`[w]` Validator or reserve stake account to split"""
    destination_stake: Pubkey
    """`[w]` Uninitialized stake account to receive withdrawal"""
    destination_stake_authority: Pubkey
    """`[]` User account to set as a new withdraw authority"""
    source_transfer_authority: Pubkey
    """`[s]` User transfer authority, for pool token account"""
    source_pool_account: Pubkey
    """`[w]` User account with pool tokens to burn from"""
    manager_fee_account: Pubkey
    """`[w]` Account to receive pool fee tokens"""
    pool_mint: Pubkey
    """`[w]` Pool token mint account"""
    token_program_id: Pubkey
    """`[]` Pool token program id"""

    # Params
    amount: int
    """Amount of pool tokens to burn in exchange for stake"""


class SetManagerParams(NamedTuple):
    """(Manager only) Update manager."""

    program_id: Pubkey
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    manager: Pubkey
    """`[s]` Current manager."""
    new_manager: Pubkey
    """`[s]` New manager."""
    new_fee_receiver: Pubkey
    """`[]` New manager fee account."""


class SetFeeParams(NamedTuple):
    """(Manager only) Update fee."""

    program_id: Pubkey
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    manager: Pubkey
    """`[s]` Manager."""

    # Params
    fee_type: FeeType
    """Type of fee to update."""
    fee: Union[Fee, int]
    """New fee, a percentage for the referral fee types."""


class SetStakerParams(NamedTuple):
    """(Manager or staker only) Update staker."""

    program_id: Pubkey
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    authority: Pubkey
    """`[s]` Manager or current staker."""
    new_staker: Pubkey
    """`[]` New staker pubkey."""


class DepositSolParams(NamedTuple):
    """Deposit SOL directly into the pool's reserve account. The output is a "pool" token
    representing ownership into the pool. Inputs are converted to the current ratio."""

    # Accounts
    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    reserve_stake: Pubkey
    """`[w]` Stake pool's reserve."""
    funding_account: Pubkey
    """`[ws]` Funding account (must be a system account)."""
    destination_pool_account: Pubkey
    """`[w]` User account to receive pool tokens."""
    manager_fee_account: Pubkey
    """`[w]` Manager's pool token account to receive deposit fee."""
    referral_pool_account: Pubkey
    """`[w]` Referrer pool token account to receive referral fee."""
    pool_mint: Pubkey
    """`[w]` Pool token mint."""
    token_program_id: Pubkey
    """`[]` Token program."""

    # Params
    amount: int
    """Amount of SOL to deposit"""

    # Optional
    deposit_authority: Optional[Pubkey] = None
    """`[s]` (Optional) Stake pool sol deposit authority."""


class SetFundingAuthorityParams(NamedTuple):
    """(Manager only) Update a funding authority."""

    program_id: Pubkey
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    manager: Pubkey
    """`[s]` Manager."""
    funding_type: FundingType
    """Authority to update."""
    new_authority: Optional[Pubkey] = None
    """`[]` New authority, `None` to unset."""


class WithdrawSolParams(NamedTuple):
    """Withdraw SOL directly from the pool's reserve account."""

    # Accounts
    program_id: Pubkey
    """Stake pool program account."""
    stake_pool: Pubkey
    """`[w]` Stake pool."""
    withdraw_authority: Pubkey
    """`[]` Stake pool withdraw authority."""
    source_transfer_authority: Pubkey
    """`[s]` Transfer authority for user pool token account."""
    source_pool_account: Pubkey
    """`[w]` User's pool token account to burn pool tokens."""
    reserve_stake: Pubkey
    """`[w]` Stake pool's reserve."""
    destination_system_account: Pubkey
    """`[w]` Destination system account to receive lamports from the reserve."""
    manager_fee_account: Pubkey
    """`[w]` Manager's pool token account to receive fee."""
    pool_mint: Pubkey
    """`[w]` Pool token mint."""
    token_program_id: Pubkey
    """`[]` Token program."""

    # Params
    amount: int
    """Amount of pool tokens to burn"""

    # Optional
    sol_withdraw_authority: Optional[Pubkey] = None
    """`[s]` (Optional) Stake pool sol withdraw authority."""


class InstructionType(IntEnum):
    """Stake Pool Instruction Types."""

    INITIALIZE = 0
    ADD_VALIDATOR_TO_POOL = 1
    REMOVE_VALIDATOR_FROM_POOL = 2
    DECREASE_VALIDATOR_STAKE = 3
    INCREASE_VALIDATOR_STAKE = 4
    SET_PREFERRED_VALIDATOR = 5
    UPDATE_VALIDATOR_LIST_BALANCE = 6
    UPDATE_STAKE_POOL_BALANCE = 7
    CLEANUP_REMOVED_VALIDATOR_ENTRIES = 8
    DEPOSIT_STAKE = 9
    WITHDRAW_STAKE = 10
    SET_MANAGER = 11
    SET_FEE = 12
    SET_STAKER = 13
    DEPOSIT_SOL = 14
    SET_FUNDING_AUTHORITY = 15
    WITHDRAW_SOL = 16
    DECREASE_VALIDATOR_STAKE_WITH_RESERVE = 21


INITIALIZE_LAYOUT = Struct(
    "epoch_fee" / FEE_LAYOUT,
    "withdrawal_fee" / FEE_LAYOUT,
    "deposit_fee" / FEE_LAYOUT,
    "referral_fee" / Int8ul,
    "max_validators" / Int32ul,
)

MOVE_STAKE_LAYOUT = Struct(
    "lamports" / Int64ul,
    "transient_stake_seed" / Int64ul,
)

SET_PREFERRED_VALIDATOR_LAYOUT = Struct(
    "validator_type" / Int8ul,
    "validator_vote_address_option" / Int8ul,
    "validator_vote_address" / Switch(
        lambda this: this.validator_vote_address_option,
        {
            0: Pass,
            1: PUBLIC_KEY_LAYOUT,
        }),
)

UPDATE_VALIDATOR_LIST_BALANCE_LAYOUT = Struct(
    "start_index" / Int32ul,
    "no_merge" / Int8ul,
)

AMOUNT_LAYOUT = Struct(
    "amount" / Int64ul
)

SET_FEE_LAYOUT = Struct(
    "fee_type" / Int8ul,
    "fee" / Switch(
        lambda this: this.fee_type,
        {
            FeeType.SOL_REFERRAL: Int8ul,
            FeeType.STAKE_REFERRAL: Int8ul,
            FeeType.EPOCH: FEE_LAYOUT,
            FeeType.STAKE_WITHDRAWAL: FEE_LAYOUT,
            FeeType.SOL_DEPOSIT: FEE_LAYOUT,
            FeeType.STAKE_DEPOSIT: FEE_LAYOUT,
            FeeType.SOL_WITHDRAWAL: FEE_LAYOUT,
        }),
)

FUNDING_TYPE_LAYOUT = Struct(
    "funding_type" / Int8ul
)

INSTRUCTIONS_LAYOUT = Struct(
    "instruction_type" / Int8ul,
    "args"
    / Switch(
        lambda this: this.instruction_type,
        {
            InstructionType.INITIALIZE: INITIALIZE_LAYOUT,
            InstructionType.ADD_VALIDATOR_TO_POOL: Pass,
            InstructionType.REMOVE_VALIDATOR_FROM_POOL: Pass,
            InstructionType.INCREASE_VALIDATOR_STAKE: MOVE_STAKE_LAYOUT,
            InstructionType.SET_PREFERRED_VALIDATOR: SET_PREFERRED_VALIDATOR_LAYOUT,
            InstructionType.UPDATE_VALIDATOR_LIST_BALANCE: UPDATE_VALIDATOR_LIST_BALANCE_LAYOUT,
            InstructionType.UPDATE_STAKE_POOL_BALANCE: Pass,
            InstructionType.CLEANUP_REMOVED_VALIDATOR_ENTRIES: Pass,
            InstructionType.DEPOSIT_STAKE: Pass,
            InstructionType.WITHDRAW_STAKE: AMOUNT_LAYOUT,
            InstructionType.SET_MANAGER: Pass,
            InstructionType.SET_FEE: SET_FEE_LAYOUT,
            InstructionType.SET_STAKER: Pass,
            InstructionType.DEPOSIT_SOL: AMOUNT_LAYOUT,
            InstructionType.SET_FUNDING_AUTHORITY: FUNDING_TYPE_LAYOUT,
            InstructionType.WITHDRAW_SOL: AMOUNT_LAYOUT,
            InstructionType.DECREASE_VALIDATOR_STAKE_WITH_RESERVE: MOVE_STAKE_LAYOUT,
        },
    ),
)


def initialize(params: InitializeParams) -> Instruction:
    """Creates a transaction instruction to initialize a new stake pool."""

    data = INSTRUCTIONS_LAYOUT.build(
        dict(
            instruction_type=InstructionType.INITIALIZE,
            args=dict(
                epoch_fee=params.epoch_fee._asdict(),
                withdrawal_fee=params.withdrawal_fee._asdict(),
                deposit_fee=params.deposit_fee._asdict(),
                referral_fee=params.referral_fee,
                max_validators=params.max_validators
            ),
        )
    )
    accounts = [
        AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.manager, is_signer=True, is_writable=False),
        AccountMeta(pubkey=params.staker, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.pool_mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.manager_fee_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.token_program_id, is_signer=False, is_writable=False),
    ]
    if params.deposit_authority:
        accounts.append(
            AccountMeta(pubkey=params.deposit_authority, is_signer=True, is_writable=False),
        )
    return Instruction(
        accounts=accounts,
        program_id=params.program_id,
        data=data,
    )


def add_validator_to_pool(params: AddValidatorToPoolParams) -> Instruction:
    """Creates instruction to add a validator to the pool."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.staker, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.funder, is_signer=True, is_writable=True),
            AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.validator_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.validator_vote, is_signer=False, is_writable=False),
            AccountMeta(pubkey=RENT, is_signer=False, is_writable=False),
            AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_HISTORY, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYSVAR_STAKE_CONFIG_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.ADD_VALIDATOR_TO_POOL,
                args=None
            )
        )
    )


def add_validator_to_pool_with_vote(
    program_id: Pubkey,
    stake_pool: StakePool,
    stake_pool_address: Pubkey,
    funder: Pubkey,
    validator: Pubkey,
) -> Instruction:
    """Creates instruction to add a validator based on their vote account address."""
    (withdraw_authority, _seed) = find_withdraw_authority_program_address(program_id, stake_pool_address)
    (validator_stake, _seed) = find_stake_program_address(program_id, validator, stake_pool_address, None)
    return add_validator_to_pool(
        AddValidatorToPoolParams(
            program_id=program_id,
            stake_pool=stake_pool_address,
            staker=stake_pool.staker,
            funder=funder,
            withdraw_authority=withdraw_authority,
            validator_list=stake_pool.validator_list,
            validator_stake=validator_stake,
            validator_vote=validator,
        )
    )


def remove_validator_from_pool(params: RemoveValidatorFromPoolParams) -> Instruction:
    """Creates instruction to remove a validator from the pool."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.staker, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.validator_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.transient_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.REMOVE_VALIDATOR_FROM_POOL,
                args=None
            )
        )
    )


def remove_validator_from_pool_with_vote(
    program_id: Pubkey,
    stake_pool: StakePool,
    stake_pool_address: Pubkey,
    validator: Pubkey,
    validator_stake_seed: Optional[int],
    transient_stake_seed: int,
) -> Instruction:
    """Creates instruction to remove a validator based on their vote account address."""
    (withdraw_authority, _seed) = find_withdraw_authority_program_address(program_id, stake_pool_address)
    (validator_stake, _seed) = find_stake_program_address(
        program_id, validator, stake_pool_address, validator_stake_seed)
    (transient_stake, _seed) = find_transient_stake_program_address(
        program_id, validator, stake_pool_address, transient_stake_seed)
    return remove_validator_from_pool(
        RemoveValidatorFromPoolParams(
            program_id=program_id,
            stake_pool=stake_pool_address,
            staker=stake_pool.staker,
            withdraw_authority=withdraw_authority,
            validator_list=stake_pool.validator_list,
            validator_stake=validator_stake,
            transient_stake=transient_stake,
        )
    )


def increase_validator_stake(params: IncreaseValidatorStakeParams) -> Instruction:
    """Creates instruction to increase the stake on a validator."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.staker, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.transient_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.validator_stake, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_vote, is_signer=False, is_writable=False),
            AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
            AccountMeta(pubkey=RENT, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_HISTORY, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYSVAR_STAKE_CONFIG_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.INCREASE_VALIDATOR_STAKE,
                args={
                    'lamports': params.lamports,
                    'transient_stake_seed': params.transient_stake_seed
                }
            )
        )
    )


def increase_validator_stake_with_vote(
    program_id: Pubkey,
    stake_pool: StakePool,
    stake_pool_address: Pubkey,
    validator: Pubkey,
    lamports: int,
    validator_stake_seed: Optional[int],
    transient_stake_seed: int,
) -> Instruction:
    """Creates instruction to increase the stake on a validator based on their vote account address."""
    (withdraw_authority, _seed) = find_withdraw_authority_program_address(program_id, stake_pool_address)
    (validator_stake, _seed) = find_stake_program_address(
        program_id, validator, stake_pool_address, validator_stake_seed)
    (transient_stake, _seed) = find_transient_stake_program_address(
        program_id, validator, stake_pool_address, transient_stake_seed)
    return increase_validator_stake(
        IncreaseValidatorStakeParams(
            program_id=program_id,
            stake_pool=stake_pool_address,
            staker=stake_pool.staker,
            withdraw_authority=withdraw_authority,
            validator_list=stake_pool.validator_list,
            reserve_stake=stake_pool.reserve_stake,
            transient_stake=transient_stake,
            validator_stake=validator_stake,
            validator_vote=validator,
            lamports=lamports,
            transient_stake_seed=transient_stake_seed,
        )
    )


def decrease_validator_stake_with_reserve(params: DecreaseValidatorStakeWithReserveParams) -> Instruction:
    """Creates instruction to decrease the stake on a validator."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.staker, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.validator_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.transient_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_HISTORY, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.DECREASE_VALIDATOR_STAKE_WITH_RESERVE,
                args={
                    'lamports': params.lamports,
                    'transient_stake_seed': params.transient_stake_seed
                }
            )
        )
    )


def decrease_validator_stake_with_vote(
    program_id: Pubkey,
    stake_pool: StakePool,
    stake_pool_address: Pubkey,
    validator: Pubkey,
    lamports: int,
    validator_stake_seed: Optional[int],
    transient_stake_seed: int,
) -> Instruction:
    """Creates instruction to decrease the stake on a validator based on their vote account address."""
    (withdraw_authority, _seed) = find_withdraw_authority_program_address(program_id, stake_pool_address)
    (validator_stake, _seed) = find_stake_program_address(
        program_id, validator, stake_pool_address, validator_stake_seed)
    (transient_stake, _seed) = find_transient_stake_program_address(
        program_id, validator, stake_pool_address, transient_stake_seed)
    return decrease_validator_stake_with_reserve(
        DecreaseValidatorStakeWithReserveParams(
            program_id=program_id,
            stake_pool=stake_pool_address,
            staker=stake_pool.staker,
            withdraw_authority=withdraw_authority,
            validator_list=stake_pool.validator_list,
            reserve_stake=stake_pool.reserve_stake,
            validator_stake=validator_stake,
            transient_stake=transient_stake,
            lamports=lamports,
            transient_stake_seed=transient_stake_seed,
        )
    )


def set_preferred_validator(params: SetPreferredValidatorParams) -> Instruction:
    """Creates instruction to set the preferred deposit or withdraw validator."""
    vote = params.validator_vote_address
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.staker, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.SET_PREFERRED_VALIDATOR,
                args={
                    'validator_type': params.validator_type,
                    'validator_vote_address_option': 1 if vote else 0,
                    'validator_vote_address': bytes(vote) if vote else None,
                }
            )
        )
    )


def update_validator_list_balance(params: UpdateValidatorListBalanceParams) -> Instruction:
    """Creates instruction to update a set of validators in the stake pool."""
    accounts = [
        AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=True),
        AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
        AccountMeta(pubkey=STAKE_HISTORY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    accounts.extend([
        AccountMeta(pubkey=pubkey, is_signer=False, is_writable=True)
        for pubkey in params.validator_and_transient_stake_pairs
    ])
    return Instruction(
        accounts=accounts,
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.UPDATE_VALIDATOR_LIST_BALANCE,
                args={'start_index': params.start_index, 'no_merge': params.no_merge}
            )
        )
    )


def update_stake_pool_balance(params: UpdateStakePoolBalanceParams) -> Instruction:
    """Creates instruction to update the overall stake pool balance."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.manager_fee_account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.pool_mint, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.token_program_id, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.UPDATE_STAKE_POOL_BALANCE,
                args=None,
            )
        )
    )


def cleanup_removed_validator_entries(params: CleanupRemovedValidatorEntriesParams) -> Instruction:
    """Creates instruction to cleanup removed validator entries."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.CLEANUP_REMOVED_VALIDATOR_ENTRIES,
                args=None,
            )
        )
    )


def update_stake_pool(
    program_id: Pubkey,
    stake_pool: StakePool,
    validator_list: ValidatorList,
    stake_pool_address: Pubkey,
    no_merge: bool,
) -> Tuple[List[Instruction], List[Instruction]]:
    """Creates all instructions needed to completely update a stake pool after epoch change.

    Returns the validator list updates, one per chunk of `MAX_VALIDATORS_TO_UPDATE`
    entries, and the final pool balance update and cleanup instructions.
    """
    (withdraw_authority, _seed) = find_withdraw_authority_program_address(program_id, stake_pool_address)
    update_list_instructions = []
    validator_chunks = [
        validator_list.validators[i:i+MAX_VALIDATORS_TO_UPDATE]
        for i in range(0, len(validator_list.validators), MAX_VALIDATORS_TO_UPDATE)
    ]
    start_index = 0
    for validator_chunk in validator_chunks:
        validator_and_transient_stake_pairs = []
        for validator in validator_chunk:
            (validator_stake_address, _) = find_stake_program_address(
                program_id,
                validator.vote_account_address,
                stake_pool_address,
                validator.validator_seed_suffix or None,
            )
            validator_and_transient_stake_pairs.append(validator_stake_address)
            (transient_stake_address, _) = find_transient_stake_program_address(
                program_id,
                validator.vote_account_address,
                stake_pool_address,
                validator.transient_seed_suffix,
            )
            validator_and_transient_stake_pairs.append(transient_stake_address)
        update_list_instructions.append(
            update_validator_list_balance(
                UpdateValidatorListBalanceParams(
                    program_id=program_id,
                    stake_pool=stake_pool_address,
                    withdraw_authority=withdraw_authority,
                    validator_list=stake_pool.validator_list,
                    reserve_stake=stake_pool.reserve_stake,
                    validator_and_transient_stake_pairs=validator_and_transient_stake_pairs,
                    start_index=start_index,
                    no_merge=no_merge,
                )
            )
        )
        start_index += MAX_VALIDATORS_TO_UPDATE

    final_instructions = [
        update_stake_pool_balance(
            UpdateStakePoolBalanceParams(
                program_id=program_id,
                stake_pool=stake_pool_address,
                withdraw_authority=withdraw_authority,
                validator_list=stake_pool.validator_list,
                reserve_stake=stake_pool.reserve_stake,
                manager_fee_account=stake_pool.manager_fee_account,
                pool_mint=stake_pool.pool_mint,
                token_program_id=stake_pool.token_program_id,
            )
        ),
        cleanup_removed_validator_entries(
            CleanupRemovedValidatorEntriesParams(
                program_id=program_id,
                stake_pool=stake_pool_address,
                validator_list=stake_pool.validator_list,
            )
        ),
    ]
    return update_list_instructions, final_instructions


def deposit_stake(params: DepositStakeParams) -> Instruction:
    """Creates a transaction instruction to deposit a stake account into a stake pool."""
    accounts = [
        AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.deposit_authority, is_signer=params.deposit_authority_is_signer, is_writable=False),
        AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.deposit_stake, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.validator_stake, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.destination_pool_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.manager_fee_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.referral_pool_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.pool_mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
        AccountMeta(pubkey=STAKE_HISTORY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.token_program_id, is_signer=False, is_writable=False),
        AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(
        accounts=accounts,
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.DEPOSIT_STAKE,
                args=None,
            )
        )
    )


def withdraw_stake(params: WithdrawStakeParams) -> Instruction:
    """Creates a transaction instruction to withdraw active stake from a stake pool."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.validator_list, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.validator_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.destination_stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.destination_stake_authority, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.source_transfer_authority, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.source_pool_account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.manager_fee_account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.pool_mint, is_signer=False, is_writable=True),
            AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.token_program_id, is_signer=False, is_writable=False),
            AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.WITHDRAW_STAKE,
                args={'amount': params.amount}
            )
        )
    )


def set_manager(params: SetManagerParams) -> Instruction:
    """Creates a `SetManager` instruction."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.manager, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.new_manager, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.new_fee_receiver, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.SET_MANAGER,
                args=None,
            )
        )
    )


def set_fee(params: SetFeeParams) -> Instruction:
    """Creates a `SetFee` instruction."""
    if params.fee_type.is_referral():
        fee = params.fee
    else:
        fee = params.fee._asdict()  # type: ignore
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.manager, is_signer=True, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.SET_FEE,
                args={'fee_type': params.fee_type, 'fee': fee},
            )
        )
    )


def set_staker(params: SetStakerParams) -> Instruction:
    """Creates a `SetStaker` instruction."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
            AccountMeta(pubkey=params.authority, is_signer=True, is_writable=False),
            AccountMeta(pubkey=params.new_staker, is_signer=False, is_writable=False),
        ],
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.SET_STAKER,
                args=None,
            )
        )
    )


def deposit_sol(params: DepositSolParams) -> Instruction:
    """Creates a transaction instruction to deposit SOL into a stake pool."""
    accounts = [
        AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.funding_account, is_signer=True, is_writable=True),
        AccountMeta(pubkey=params.destination_pool_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.manager_fee_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.referral_pool_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.pool_mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.token_program_id, is_signer=False, is_writable=False),
    ]
    if params.deposit_authority:
        accounts.append(AccountMeta(pubkey=params.deposit_authority, is_signer=True, is_writable=False))
    return Instruction(
        accounts=accounts,
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.DEPOSIT_SOL,
                args={'amount': params.amount}
            )
        )
    )


def set_funding_authority(params: SetFundingAuthorityParams) -> Instruction:
    """Creates a `SetFundingAuthority` instruction."""
    accounts = [
        AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.manager, is_signer=True, is_writable=False),
    ]
    if params.new_authority:
        accounts.append(AccountMeta(pubkey=params.new_authority, is_signer=False, is_writable=False))
    return Instruction(
        accounts=accounts,
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.SET_FUNDING_AUTHORITY,
                args={'funding_type': params.funding_type},
            )
        )
    )


def withdraw_sol(params: WithdrawSolParams) -> Instruction:
    """Creates a transaction instruction to withdraw SOL from a stake pool."""
    accounts = [
        AccountMeta(pubkey=params.stake_pool, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.withdraw_authority, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.source_transfer_authority, is_signer=True, is_writable=False),
        AccountMeta(pubkey=params.source_pool_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.reserve_stake, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.destination_system_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.manager_fee_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=params.pool_mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
        AccountMeta(pubkey=STAKE_HISTORY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=STAKE_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=params.token_program_id, is_signer=False, is_writable=False),
    ]
    if params.sol_withdraw_authority:
        accounts.append(AccountMeta(pubkey=params.sol_withdraw_authority, is_signer=True, is_writable=False))
    return Instruction(
        accounts=accounts,
        program_id=params.program_id,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.WITHDRAW_SOL,
                args={'amount': params.amount}
            )
        )
    )
