import logging

from solana.rpc.commitment import Confirmed
from solders.pubkey import Pubkey

from jito_stake_pool.constants import STAKE_POOL_PROGRAM_ID
import jito_stake_pool.instructions as sp
from jito_stake_pool_cli.client import get_stake_pool, get_validator_list
from jito_stake_pool_cli.config import Config
from jito_stake_pool_cli.transaction import checked_transaction_with_signers, send_transaction
from jito_stake_pool_cli.transaction import send_transaction_no_wait

logger = logging.getLogger(__name__)


async def command_update(config: Config, stake_pool_address: Pubkey, force: bool, no_merge: bool):
    """Brings the validator list and pool balances up to date for the current epoch."""
    if config.no_update:
        print("Update requested, but --no-update flag specified, so doing nothing")
        return

    stake_pool = await get_stake_pool(config.client, stake_pool_address)
    resp = await config.client.get_epoch_info(commitment=Confirmed)
    epoch = resp.value.epoch
    if stake_pool.last_update_epoch == epoch:
        if force:
            print("Update not required, but --force flag specified, so doing it anyway")
        else:
            print("Update not required")
            return

    validator_list = await get_validator_list(config.client, stake_pool.validator_list)
    update_list_instructions, final_instructions = sp.update_stake_pool(
        STAKE_POOL_PROGRAM_ID,
        stake_pool,
        validator_list,
        stake_pool_address,
        no_merge,
    )

    if update_list_instructions:
        last_instruction = update_list_instructions.pop()
        for index, instruction in enumerate(update_list_instructions):
            logger.debug("Updating validator list chunk %d without waiting", index)
            transaction = await checked_transaction_with_signers(config, [instruction], [config.fee_payer])
            await send_transaction_no_wait(config, transaction)
        logger.debug("Updating last validator list chunk")
        transaction = await checked_transaction_with_signers(config, [last_instruction], [config.fee_payer])
        await send_transaction(config, transaction)

    transaction = await checked_transaction_with_signers(config, final_instructions, [config.fee_payer])
    await send_transaction(config, transaction)


async def maybe_update(config: Config, stake_pool_address: Pubkey):
    if not config.no_update:
        await command_update(config, stake_pool_address, False, False)
