"""Conversion of SOL amounts and rendering of pool details for the terminal."""

import json
from typing import Any, Dict, Optional

from solders.pubkey import Pubkey

from jito_stake_pool.state import Fee, StakePool, ValidatorList
from stake.constants import LAMPORTS_PER_SOL, lamports_to_sol, sol_to_lamports
from jito_stake_pool_cli.errors import StakePoolCliError


def format_sol(lamports: int) -> str:
    return f"◎{lamports // LAMPORTS_PER_SOL}.{lamports % LAMPORTS_PER_SOL:09}"


def positive_lamports(amount: float) -> int:
    lamports = sol_to_lamports(amount)
    if lamports <= 0:
        raise StakePoolCliError(f"Invalid amount {amount}, must be greater than 0 SOL")
    return lamports


def _optional(value: Optional[Any]) -> Optional[str]:
    return str(value) if value is not None else None


def _fee(fee: Optional[Fee]) -> Optional[Dict[str, int]]:
    if fee is None:
        return None
    return {'numerator': fee.numerator, 'denominator': fee.denominator}


def stake_pool_as_dict(
    stake_pool_address: Pubkey,
    stake_pool: StakePool,
    validator_list: ValidatorList,
    withdraw_authority: Pubkey,
) -> Dict[str, Any]:
    return {
        'address': str(stake_pool_address),
        'manager': str(stake_pool.manager),
        'staker': str(stake_pool.staker),
        'stakeDepositAuthority': str(stake_pool.stake_deposit_authority),
        'stakeWithdrawAuthority': str(withdraw_authority),
        'validatorList': str(stake_pool.validator_list),
        'reserveStake': str(stake_pool.reserve_stake),
        'poolMint': str(stake_pool.pool_mint),
        'managerFeeAccount': str(stake_pool.manager_fee_account),
        'tokenProgramId': str(stake_pool.token_program_id),
        'totalLamports': stake_pool.total_lamports,
        'poolTokenSupply': stake_pool.pool_token_supply,
        'lastUpdateEpoch': stake_pool.last_update_epoch,
        'epochFee': _fee(stake_pool.epoch_fee),
        'nextEpochFee': _fee(stake_pool.next_epoch_fee),
        'preferredDepositValidator': _optional(stake_pool.preferred_deposit_validator),
        'preferredWithdrawValidator': _optional(stake_pool.preferred_withdraw_validator),
        'stakeDepositFee': _fee(stake_pool.stake_deposit_fee),
        'stakeWithdrawalFee': _fee(stake_pool.stake_withdrawal_fee),
        'stakeReferralFee': stake_pool.stake_referral_fee,
        'solDepositAuthority': _optional(stake_pool.sol_deposit_authority),
        'solDepositFee': _fee(stake_pool.sol_deposit_fee),
        'solReferralFee': stake_pool.sol_referral_fee,
        'solWithdrawAuthority': _optional(stake_pool.sol_withdraw_authority),
        'solWithdrawalFee': _fee(stake_pool.sol_withdrawal_fee),
        'maxValidators': validator_list.max_validators,
        'validators': [
            {
                'voteAccountAddress': str(validator.vote_account_address),
                'activeStakeLamports': validator.active_stake_lamports,
                'transientStakeLamports': validator.transient_stake_lamports,
                'lastUpdateEpoch': validator.last_update_epoch,
                'transientSeedSuffix': validator.transient_seed_suffix,
                'validatorSeedSuffix': validator.validator_seed_suffix,
                'status': validator.status.name,
            }
            for validator in validator_list.validators
        ],
    }


def print_json(value: Dict[str, Any], compact: bool):
    if compact:
        print(json.dumps(value, separators=(',', ':')))
    else:
        print(json.dumps(value, indent=2))


def print_stake_pool(
    stake_pool_address: Pubkey,
    stake_pool: StakePool,
    validator_list: ValidatorList,
    withdraw_authority: Pubkey,
    verbose: bool,
):
    print(f"Stake Pool: {stake_pool_address}")
    print(f"Validator List: {stake_pool.validator_list}")
    print(f"Manager: {stake_pool.manager}")
    print(f"Staker: {stake_pool.staker}")
    print(f"Depositor: {stake_pool.stake_deposit_authority}")
    print(f"SOL Deposit Authority: {_optional(stake_pool.sol_deposit_authority) or 'None'}")
    print(f"SOL Withdraw Authority: {_optional(stake_pool.sol_withdraw_authority) or 'None'}")
    print(f"Withdraw Authority: {withdraw_authority}")
    print(f"Pool Token Mint: {stake_pool.pool_mint}")
    print(f"Fee Account: {stake_pool.manager_fee_account}")
    if stake_pool.preferred_deposit_validator:
        print(f"Preferred Deposit Validator: {stake_pool.preferred_deposit_validator}")
    if stake_pool.preferred_withdraw_validator:
        print(f"Preferred Withdraw Validator: {stake_pool.preferred_withdraw_validator}")
    print(f"Epoch Fee: {stake_pool.epoch_fee} of epoch rewards")
    print(f"Stake Withdrawal Fee: {stake_pool.stake_withdrawal_fee} of withdrawal amount")
    print(f"SOL Withdrawal Fee: {stake_pool.sol_withdrawal_fee} of withdrawal amount")
    print(f"Stake Deposit Fee: {stake_pool.stake_deposit_fee} of deposit amount")
    print(f"SOL Deposit Fee: {stake_pool.sol_deposit_fee} of deposit amount")
    print(f"Stake Deposit Referral Fee: {stake_pool.stake_referral_fee}% of Stake Deposit Fee")
    print(f"SOL Deposit Referral Fee: {stake_pool.sol_referral_fee}% of SOL Deposit Fee")
    print()
    print(f"Reserve Stake: {stake_pool.reserve_stake}")
    if verbose:
        print(f"Last Update Epoch: {stake_pool.last_update_epoch}")
    for validator in validator_list.validators:
        print(
            f"Vote Account: {validator.vote_account_address}\t"
            f"Balance: {format_sol(validator.stake_lamports())}\t"
            f"Last Update Epoch: {validator.last_update_epoch}"
        )
        if verbose:
            print(
                f"\tActive: {format_sol(validator.active_stake_lamports)}\t"
                f"Transient: {format_sol(validator.transient_stake_lamports)}\t"
                f"Status: {validator.status.name}"
            )
    print()
    print(f"Total Pool Stake: {format_sol(stake_pool.total_lamports)}")
    print(f"Total Pool Tokens: {lamports_to_sol(stake_pool.pool_token_supply)}")
    print(f"Current Number of Validators: {len(validator_list.validators)}")
    print(f"Max Number of Validators: {validator_list.max_validators}")
