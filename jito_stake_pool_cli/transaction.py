"""Transaction assembly, fee payer checks and submission."""

import logging
from typing import List, Sequence

from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import VersionedTransaction

from jito_stake_pool_cli.client import get_balance
from jito_stake_pool_cli.config import Config
from jito_stake_pool_cli.errors import InsufficientFundsError
from jito_stake_pool_cli.output import format_sol

logger = logging.getLogger(__name__)

OPTS = TxOpts(skip_confirmation=False, preflight_commitment=Confirmed)


def unique_signers(signers: Sequence[Keypair]) -> List[Keypair]:
    """Drops repeated signers, keeping the first keypair seen for each public key."""
    seen = set()
    unique = []
    for signer in signers:
        if signer.pubkey() not in seen:
            seen.add(signer.pubkey())
            unique.append(signer)
    return unique


async def check_fee_payer_balance(config: Config, required_balance: int):
    balance = await get_balance(config.client, config.fee_payer.pubkey())
    if balance < required_balance:
        raise InsufficientFundsError(
            f"Fee payer, {config.fee_payer.pubkey()}, has insufficient balance: "
            f"{format_sol(required_balance)} required, {format_sol(balance)} available"
        )


async def get_fee_for_message(config: Config, message: Message) -> int:
    resp = await config.client.get_fee_for_message(message, commitment=Confirmed)
    return resp.value or 0


async def get_latest_blockhash(config: Config) -> Hash:
    resp = await config.client.get_latest_blockhash(commitment=Confirmed)
    logger.debug("Using recent blockhash %s", resp.value.blockhash)
    return resp.value.blockhash


def sign_message(message: Message, signers: Sequence[Keypair]) -> VersionedTransaction:
    required = set(message.account_keys[:message.header.num_required_signatures])
    keypairs = [signer for signer in unique_signers(signers) if signer.pubkey() in required]
    return VersionedTransaction(message, keypairs)


async def checked_transaction_with_signers(
    config: Config,
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair],
    rent_free_balances: int = 0,
) -> VersionedTransaction:
    """Builds and signs a transaction paid by the fee payer, after checking it can pay the fee
    plus `rent_free_balances` for the accounts the transaction creates.

    Signers the message does not require are left out, so callers can pass optional
    authorities unconditionally.
    """
    recent_blockhash = await get_latest_blockhash(config)
    message = Message.new_with_blockhash(list(instructions), config.fee_payer.pubkey(), recent_blockhash)
    await check_fee_payer_balance(config, rent_free_balances + await get_fee_for_message(config, message))
    return sign_message(message, signers)


async def send_transaction(config: Config, transaction: VersionedTransaction):
    if config.dry_run:
        resp = await config.client.simulate_transaction(transaction)
        print(f"Simulate result: {resp.value}")
    else:
        resp = await config.client.send_transaction(transaction, opts=OPTS)
        print(f"Signature: {resp.value}")


async def send_transaction_no_wait(config: Config, transaction: VersionedTransaction):
    """Like `send_transaction`, without waiting for confirmation."""
    if config.dry_run:
        resp = await config.client.simulate_transaction(transaction)
        print(f"Simulate result: {resp.value}")
    else:
        resp = await config.client.send_transaction(
            transaction, opts=TxOpts(skip_confirmation=True, preflight_commitment=Confirmed))
        print(f"Signature: {resp.value}")
