from typing import List, Tuple

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
import solders.system_program as sys

from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.async_client import AsyncToken
from spl.token._layouts import ACCOUNT_LAYOUT, MINT_LAYOUT
import spl.token.instructions as spl_token

POOL_TOKEN_DECIMALS = 9


async def create_mint(
    client: AsyncClient,
    payer: Pubkey,
    mint: Pubkey,
    mint_authority: Pubkey,
    instructions: List[Instruction],
) -> int:
    """Appends the instructions creating a pool token mint, returns the rent paid for it."""
    mint_balance = await AsyncToken.get_min_balance_rent_for_exempt_for_mint(client)
    print(f"Creating mint {mint}")
    instructions.append(
        sys.create_account(
            sys.CreateAccountParams(
                from_pubkey=payer,
                to_pubkey=mint,
                lamports=mint_balance,
                space=MINT_LAYOUT.sizeof(),
                owner=TOKEN_PROGRAM_ID,
            )
        )
    )
    instructions.append(
        spl_token.initialize_mint(
            spl_token.InitializeMintParams(
                program_id=TOKEN_PROGRAM_ID,
                mint=mint,
                decimals=POOL_TOKEN_DECIMALS,
                mint_authority=mint_authority,
                freeze_authority=None,
            )
        )
    )
    return mint_balance


async def add_associated_token_account(
    client: AsyncClient,
    payer: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    instructions: List[Instruction],
) -> Tuple[Pubkey, int]:
    """Returns the owner's associated token account for `mint`, and the rent needed to create it.

    When the account does not exist yet, the creation instruction is appended to `instructions`.
    """
    account = spl_token.get_associated_token_address(owner, mint)
    resp = await client.get_account_info(account, commitment=Confirmed)
    if resp.value is not None:
        print(f"Using existing associated token account {account} to receive stake pool tokens "
              f"of mint {mint}, owned by {owner}")
        return account, 0

    print(f"Creating associated token account {account} to receive stake pool tokens "
          f"of mint {mint}, owned by {owner}")
    resp = await client.get_minimum_balance_for_rent_exemption(ACCOUNT_LAYOUT.sizeof())
    instructions.append(
        spl_token.create_associated_token_account(payer=payer, owner=owner, mint=mint)
    )
    return account, resp.value
