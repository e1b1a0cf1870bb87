import pytest
from types import SimpleNamespace
from typing import Dict, List, Optional

from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import get_associated_token_address

from jito_stake_pool.constants import STAKE_POOL_PROGRAM_ID, find_deposit_authority_program_address
from jito_stake_pool.state import AccountType, StakeStatus, DECODE_STAKE_POOL_LAYOUT, DECODE_VALIDATOR_LIST_LAYOUT
from stake.constants import LAMPORTS_PER_SOL
from stake.state import Authorized, Lockup, StakeStakeType, STAKE_STATE_LAYOUT
from jito_stake_pool_cli.config import Config

CURRENT_EPOCH: int = 100
RENT_EXEMPTION: int = 2_282_880
TRANSACTION_FEE: int = 5_000
FEE_PAYER_LAMPORTS: int = 10 * LAMPORTS_PER_SOL
TOKEN_ACCOUNT_LEN: int = 165


def response(value):
    return SimpleNamespace(value=value)


class FakeAsyncClient:
    """In-memory stand-in for `AsyncClient`, answering the RPC calls the commands make."""

    def __init__(self):
        self.accounts: Dict[Pubkey, bytes] = {}
        self.balances: Dict[Pubkey, int] = {}
        self.epoch = CURRENT_EPOCH
        self.sent: List[VersionedTransaction] = []
        self.sent_opts: List = []
        self.simulated: List[VersionedTransaction] = []
        self.closed = False

    async def get_account_info(self, address: Pubkey, commitment=None):
        data = self.accounts.get(address)
        if data is None:
            return response(None)
        return response(SimpleNamespace(data=data, lamports=self.balances.get(address, 0)))

    async def get_balance(self, address: Pubkey, commitment=None):
        return response(self.balances.get(address, 0))

    async def get_minimum_balance_for_rent_exemption(self, size: int, commitment=None):
        return response(RENT_EXEMPTION)

    async def get_latest_blockhash(self, commitment=None):
        return response(SimpleNamespace(blockhash=Hash.default(), last_valid_block_height=0))

    async def get_fee_for_message(self, message, commitment=None):
        return response(TRANSACTION_FEE)

    async def get_epoch_info(self, commitment=None):
        return response(SimpleNamespace(epoch=self.epoch))

    async def send_transaction(self, txn: VersionedTransaction, opts=None):
        self.sent.append(txn)
        self.sent_opts.append(opts)
        return response(txn.signatures[0])

    async def simulate_transaction(self, txn: VersionedTransaction, *args, **kwargs):
        self.simulated.append(txn)
        return response(SimpleNamespace(err=None, logs=[]))

    async def close(self):
        self.closed = True


def encode_fee(numerator: int, denominator: int) -> dict:
    return {'numerator': numerator, 'denominator': denominator}


def encode_validator_list(max_validators: int, validators: List[dict]) -> bytes:
    return DECODE_VALIDATOR_LIST_LAYOUT.build(dict(
        account_type=AccountType.VALIDATOR_LIST,
        max_validators=max_validators,
        validators_len=len(validators),
        validators=validators,
    ))


def validator_entry(
    vote: Pubkey,
    active_stake_lamports: int = 10 * LAMPORTS_PER_SOL,
    status: StakeStatus = StakeStatus.ACTIVE,
    transient_seed_suffix: int = 0,
    validator_seed_suffix: int = 0,
) -> dict:
    return dict(
        active_stake_lamports=active_stake_lamports,
        transient_stake_lamports=0,
        last_update_epoch=CURRENT_EPOCH,
        transient_seed_suffix=transient_seed_suffix,
        unused=0,
        validator_seed_suffix=validator_seed_suffix,
        status=status,
        vote_account_address=bytes(vote),
    )


def encode_token_account(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    data = bytes(mint) + bytes(owner) + amount.to_bytes(8, 'little')
    return data + bytes(TOKEN_ACCOUNT_LEN - len(data))


def encode_stake_account(
    authority: Pubkey, vote: Optional[Pubkey], state_type: StakeStakeType = StakeStakeType.STAKE,
) -> bytes:
    return STAKE_STATE_LAYOUT.build(dict(
        state_type=state_type,
        state=dict(
            meta=dict(
                rent_exempt_reserve=RENT_EXEMPTION,
                authorized=Authorized(staker=authority, withdrawer=authority).as_bytes_dict(),
                lockup=Lockup.default().as_bytes_dict(),
            ),
            stake=dict(
                delegation=dict(
                    voter_pubkey=bytes(vote or Pubkey.default()),
                    stake=LAMPORTS_PER_SOL,
                    activation_epoch=CURRENT_EPOCH - 10,
                    deactivation_epoch=2**64 - 1,
                    warmup_cooldown_rate=0.25,
                ),
                credits_observed=0,
            ),
        ),
    ))


class PoolFixture:
    """Keypairs and addresses of a stake pool stored in a `FakeAsyncClient`."""

    def __init__(self, manager: Keypair, staker: Keypair):
        self.address = Keypair().pubkey()
        self.manager = manager
        self.staker = staker
        self.validator_list = Keypair().pubkey()
        self.reserve_stake = Keypair().pubkey()
        self.pool_mint = Keypair().pubkey()
        self.manager_fee_account = Keypair().pubkey()
        (self.deposit_authority, _) = find_deposit_authority_program_address(STAKE_POOL_PROGRAM_ID, self.address)

    def encode(self, **overrides) -> bytes:
        fee = encode_fee(1, 100)
        fields = dict(
            account_type=AccountType.STAKE_POOL,
            manager=bytes(self.manager.pubkey()),
            staker=bytes(self.staker.pubkey()),
            stake_deposit_authority=bytes(self.deposit_authority),
            stake_withdraw_bump_seed=255,
            validator_list=bytes(self.validator_list),
            reserve_stake=bytes(self.reserve_stake),
            pool_mint=bytes(self.pool_mint),
            manager_fee_account=bytes(self.manager_fee_account),
            token_program_id=bytes(TOKEN_PROGRAM_ID),
            total_lamports=100 * LAMPORTS_PER_SOL,
            pool_token_supply=95 * LAMPORTS_PER_SOL,
            last_update_epoch=CURRENT_EPOCH,
            lockup=Lockup.default().as_bytes_dict(),
            epoch_fee=fee,
            next_epoch_fee_option=0,
            next_epoch_fee=None,
            preferred_deposit_validator_option=0,
            preferred_deposit_validator=None,
            preferred_withdraw_validator_option=0,
            preferred_withdraw_validator=None,
            stake_deposit_fee=fee,
            stake_withdrawal_fee=fee,
            next_stake_withdrawal_fee_option=0,
            next_stake_withdrawal_fee=None,
            stake_referral_fee=20,
            sol_deposit_authority_option=0,
            sol_deposit_authority=None,
            sol_deposit_fee=fee,
            sol_referral_fee=20,
            sol_withdraw_authority_option=0,
            sol_withdraw_authority=None,
            sol_withdrawal_fee=fee,
            next_sol_withdrawal_fee_option=0,
            next_sol_withdrawal_fee=None,
            last_epoch_pool_token_supply=90 * LAMPORTS_PER_SOL,
            last_epoch_total_lamports=94 * LAMPORTS_PER_SOL,
        )
        fields.update(overrides)
        return DECODE_STAKE_POOL_LAYOUT.build(fields)

    def install(self, client: FakeAsyncClient, validators: Optional[List[dict]] = None, max_validators: int = 10,
                **overrides):
        client.accounts[self.address] = self.encode(**overrides)
        client.accounts[self.validator_list] = encode_validator_list(max_validators, validators or [])

    def token_account(self, owner: Pubkey) -> Pubkey:
        return get_associated_token_address(owner, self.pool_mint)


@pytest.fixture
def client() -> FakeAsyncClient:
    return FakeAsyncClient()


@pytest.fixture
def fee_payer(client) -> Keypair:
    fee_payer = Keypair()
    client.balances[fee_payer.pubkey()] = FEE_PAYER_LAMPORTS
    return fee_payer


@pytest.fixture
def manager() -> Keypair:
    return Keypair()


@pytest.fixture
def staker() -> Keypair:
    return Keypair()


@pytest.fixture
def config(client, fee_payer, manager, staker) -> Config:
    return Config(
        client=client,
        manager=manager,
        staker=staker,
        funding_authority=None,
        token_owner=fee_payer,
        fee_payer=fee_payer,
    )


@pytest.fixture
def pool(client, manager, staker) -> PoolFixture:
    pool = PoolFixture(manager, staker)
    pool.install(client)
    return pool


@pytest.fixture
def validators() -> List[Pubkey]:
    return [Keypair().pubkey() for _ in range(3)]


def required_signers(txn: VersionedTransaction) -> List[Pubkey]:
    message = txn.message
    return list(message.account_keys[:message.header.num_required_signatures])


def instruction_program_ids(txn: VersionedTransaction) -> List[Pubkey]:
    message = txn.message
    return [message.account_keys[ix.program_id_index] for ix in message.instructions]
