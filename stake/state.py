"""Stake State."""

from enum import IntEnum
from typing import NamedTuple, Dict, Optional
from construct import Bytes, Container, Struct, Float64l, Int32ul, Int64sl, Int64ul  # type: ignore

from solders.pubkey import Pubkey

PUBLIC_KEY_LAYOUT = Bytes(32)


class Lockup(NamedTuple):
    """Lockup for a stake account."""
    unix_timestamp: int
    epoch: int
    custodian: Pubkey

    @classmethod
    def decode_container(cls, container: Container):
        return Lockup(
            unix_timestamp=container['unix_timestamp'],
            epoch=container['epoch'],
            custodian=Pubkey(container['custodian']),
        )

    @classmethod
    def default(cls):
        return Lockup(unix_timestamp=0, epoch=0, custodian=Pubkey.default())

    def as_bytes_dict(self) -> Dict:
        self_dict = self._asdict()
        self_dict['custodian'] = bytes(self_dict['custodian'])
        return self_dict


class Authorized(NamedTuple):
    """Define who is authorized to change a stake."""
    staker: Pubkey
    withdrawer: Pubkey

    @classmethod
    def decode_container(cls, container: Container):
        return Authorized(
            staker=Pubkey(container['staker']),
            withdrawer=Pubkey(container['withdrawer']),
        )

    def as_bytes_dict(self) -> Dict:
        return {
            'staker': bytes(self.staker),
            'withdrawer': bytes(self.withdrawer),
        }


class StakeAuthorize(IntEnum):
    """Stake Authorization Types."""
    STAKER = 0
    WITHDRAWER = 1


class StakeStakeType(IntEnum):
    """Stake State Types."""
    UNINITIALIZED = 0
    INITIALIZED = 1
    STAKE = 2
    REWARDS_POOL = 3


class Delegation(NamedTuple):
    """Delegation of a stake account to a vote account."""
    voter_pubkey: Pubkey
    stake: int
    activation_epoch: int
    deactivation_epoch: int

    @classmethod
    def decode_container(cls, container: Container):
        return Delegation(
            voter_pubkey=Pubkey(container['voter_pubkey']),
            stake=container['stake'],
            activation_epoch=container['activation_epoch'],
            deactivation_epoch=container['deactivation_epoch'],
        )


class StakeStake(NamedTuple):
    """Stake state, as stored in a stake account."""
    state_type: StakeStakeType
    authorized: Optional[Authorized]
    delegation: Optional[Delegation]

    @classmethod
    def decode(cls, data: bytes):
        parsed = STAKE_STATE_LAYOUT.parse(data)
        state_type = StakeStakeType(parsed['state_type'])
        authorized = None
        delegation = None
        if state_type in (StakeStakeType.INITIALIZED, StakeStakeType.STAKE):
            authorized = Authorized.decode_container(parsed['state']['meta']['authorized'])
        if state_type == StakeStakeType.STAKE:
            delegation = Delegation.decode_container(parsed['state']['stake']['delegation'])
        return StakeStake(
            state_type=state_type,
            authorized=authorized,
            delegation=delegation,
        )


LOCKUP_LAYOUT = Struct(
    "unix_timestamp" / Int64sl,
    "epoch" / Int64ul,
    "custodian" / PUBLIC_KEY_LAYOUT,
)


AUTHORIZED_LAYOUT = Struct(
    "staker" / PUBLIC_KEY_LAYOUT,
    "withdrawer" / PUBLIC_KEY_LAYOUT,
)

META_LAYOUT = Struct(
    "rent_exempt_reserve" / Int64ul,
    "authorized" / AUTHORIZED_LAYOUT,
    "lockup" / LOCKUP_LAYOUT,
)

DELEGATION_LAYOUT = Struct(
    "voter_pubkey" / PUBLIC_KEY_LAYOUT,
    "stake" / Int64ul,
    "activation_epoch" / Int64ul,
    "deactivation_epoch" / Int64ul,
    "warmup_cooldown_rate" / Float64l,
)

STAKE_LAYOUT = Struct(
    "delegation" / DELEGATION_LAYOUT,
    "credits_observed" / Int64ul,
)

STAKE_AND_META_LAYOUT = Struct(
    "meta" / META_LAYOUT,
    "stake" / STAKE_LAYOUT,
)

# Stake accounts are always allocated at full size, so the meta and stake
# sections parse regardless of state type; callers check `state_type`.
STAKE_STATE_LAYOUT = Struct(
    "state_type" / Int32ul,
    "state" / STAKE_AND_META_LAYOUT,
)
