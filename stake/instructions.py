"""Stake Program Instructions."""

from enum import IntEnum
from typing import NamedTuple

from construct import Switch  # type: ignore
from construct import Int32ul, Pass  # type: ignore
from construct import Struct

from solders.pubkey import Pubkey
from solders.instruction import AccountMeta, Instruction
from solders.sysvar import CLOCK, RENT

from stake.constants import STAKE_PROGRAM_ID
from stake.state import AUTHORIZED_LAYOUT, LOCKUP_LAYOUT, PUBLIC_KEY_LAYOUT, Authorized, Lockup, StakeAuthorize


class InitializeParams(NamedTuple):
    """Initialize stake transaction params."""

    stake: Pubkey
    """`[w]` Uninitialized stake account."""
    authorized: Authorized
    """Information about the staker and withdrawer keys."""
    lockup: Lockup
    """Stake lockup, if any."""


class AuthorizeParams(NamedTuple):
    """Authorize stake transaction params."""

    stake: Pubkey
    """`[w]` Initialized stake account to modify."""
    authority: Pubkey
    """`[s]` Current stake authority."""

    # Params
    new_authority: Pubkey
    """New authority's public key."""
    stake_authorize: StakeAuthorize
    """Type of authority to modify, staker or withdrawer."""


class InstructionType(IntEnum):
    """Stake Instruction Types."""

    INITIALIZE = 0
    AUTHORIZE = 1
    DELEGATE_STAKE = 2
    SPLIT = 3
    WITHDRAW = 4
    DEACTIVATE = 5
    SET_LOCKUP = 6
    MERGE = 7
    AUTHORIZE_WITH_SEED = 8
    INITIALIZE_CHECKED = 9
    AUTHORIZED_CHECKED = 10
    AUTHORIZED_CHECKED_WITH_SEED = 11
    SET_LOCKUP_CHECKED = 12


INITIALIZE_LAYOUT = Struct(
    "authorized" / AUTHORIZED_LAYOUT,
    "lockup" / LOCKUP_LAYOUT,
)


AUTHORIZE_LAYOUT = Struct(
    "new_authority" / PUBLIC_KEY_LAYOUT,
    "stake_authorize" / Int32ul,
)


INSTRUCTIONS_LAYOUT = Struct(
    "instruction_type" / Int32ul,
    "args"
    / Switch(
        lambda this: this.instruction_type,
        {
            InstructionType.INITIALIZE: INITIALIZE_LAYOUT,
            InstructionType.AUTHORIZE: AUTHORIZE_LAYOUT,
        },
        default=Pass,
    ),
)


def initialize(params: InitializeParams) -> Instruction:
    """Creates a transaction instruction to initialize a new stake."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=RENT, is_signer=False, is_writable=False),
        ],
        program_id=STAKE_PROGRAM_ID,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.INITIALIZE,
                args=dict(
                    authorized=params.authorized.as_bytes_dict(),
                    lockup=params.lockup.as_bytes_dict(),
                ),
            )
        )
    )


def authorize(params: AuthorizeParams) -> Instruction:
    """Creates an instruction to change the authority on a stake account."""
    return Instruction(
        accounts=[
            AccountMeta(pubkey=params.stake, is_signer=False, is_writable=True),
            AccountMeta(pubkey=CLOCK, is_signer=False, is_writable=False),
            AccountMeta(pubkey=params.authority, is_signer=True, is_writable=False),
        ],
        program_id=STAKE_PROGRAM_ID,
        data=INSTRUCTIONS_LAYOUT.build(
            dict(
                instruction_type=InstructionType.AUTHORIZE,
                args={
                    'new_authority': bytes(params.new_authority),
                    'stake_authorize': params.stake_authorize,
                },
            )
        )
    )
