"""Command line entry point for operating a Jito stake pool."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from solders.pubkey import Pubkey

from jito_stake_pool.state import Fee
from jito_stake_pool.instructions import FeeType, FundingType, PreferredValidatorType
from jito_stake_pool_cli.config import Config, get_signer, keypair_from_file, load_cli_config, new_client
from jito_stake_pool_cli.commands.deposit import command_deposit_sol, command_deposit_stake
from jito_stake_pool_cli.commands.manage import command_set_fee, command_set_funding_authority
from jito_stake_pool_cli.commands.manage import command_set_manager, command_set_preferred_validator
from jito_stake_pool_cli.commands.manage import command_set_referral_fee, command_set_staker
from jito_stake_pool_cli.commands.pool import command_create_pool, command_list
from jito_stake_pool_cli.commands.update import command_update
from jito_stake_pool_cli.commands.validators import command_add_validator, command_decrease_validator_stake
from jito_stake_pool_cli.commands.validators import command_increase_validator_stake, command_remove_validator
from jito_stake_pool_cli.commands.withdraw import command_withdraw_sol, command_withdraw_stake

logger = logging.getLogger(__name__)

FUNDING_TYPES = {
    'stake-deposit': FundingType.STAKE_DEPOSIT,
    'sol-deposit': FundingType.SOL_DEPOSIT,
    'sol-withdraw': FundingType.SOL_WITHDRAW,
}

FEE_TYPES = {
    'epoch': FeeType.EPOCH,
    'stake-deposit': FeeType.STAKE_DEPOSIT,
    'sol-deposit': FeeType.SOL_DEPOSIT,
    'stake-withdrawal': FeeType.STAKE_WITHDRAWAL,
    'sol-withdrawal': FeeType.SOL_WITHDRAWAL,
}

REFERRAL_FEE_TYPES = {
    'sol': FeeType.SOL_REFERRAL,
    'stake': FeeType.STAKE_REFERRAL,
}

PREFERRED_VALIDATOR_TYPES = {
    'deposit': PreferredValidatorType.DEPOSIT,
    'withdraw': PreferredValidatorType.WITHDRAW,
}


def pubkey(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid public key: {value}")


def add_pool_argument(parser: argparse.ArgumentParser):
    parser.add_argument('pool', metavar='POOL_ADDRESS', type=pubkey,
                        help='Stake pool address')


def add_receiver_arguments(parser: argparse.ArgumentParser):
    parser.add_argument('--token-receiver', metavar='ADDRESS', type=pubkey,
                        help='Account to receive the minted pool tokens. '
                             'Defaults to the token-owner\'s associated pool token account. '
                             'Creates the account if it does not exist.')
    parser.add_argument('--referrer', metavar='ADDRESS', type=pubkey,
                        help='Pool token account to receive the referral fees for deposits. '
                             'Defaults to the token receiver.')


def add_global_arguments(parser: argparse.ArgumentParser, suppress: bool = False):
    """Options accepted both before and after the subcommand.

    The subcommand copies use `SUPPRESS` so they only override the top-level values when given.
    """
    def default(value):
        return argparse.SUPPRESS if suppress else value

    parser.add_argument('-C', '--config-file', metavar='PATH', default=default(None),
                        help='Configuration file to use')
    parser.add_argument('-v', '--verbose', action='store_true', default=default(False),
                        help='Show additional information')
    parser.add_argument('--output', dest='output_format', choices=['json', 'json-compact'],
                        default=default(None),
                        help='Return information in specified output format')
    parser.add_argument('--dry-run', action='store_true', default=default(False),
                        help='Simulate transaction instead of executing')
    parser.add_argument('--no-update', action='store_true', default=default(False),
                        help='Do not automatically update the stake pool if needed')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='jito-stake-pool', description='Jito stake pool management')
    add_global_arguments(parser)
    parser.add_argument('--url', dest='json_rpc_url', metavar='URL',
                        help='JSON RPC URL for the cluster. Default from the configuration file.')
    parser.add_argument('--staker', metavar='KEYPAIR',
                        help='Stake pool staker. [default: cli config keypair]')
    parser.add_argument('--manager', metavar='KEYPAIR',
                        help='Stake pool manager. [default: cli config keypair]')
    parser.add_argument('--funding-authority', metavar='KEYPAIR',
                        help='Stake pool funding authority for deposits or withdrawals.')
    parser.add_argument('--token-owner', metavar='KEYPAIR',
                        help='Owner of pool token account [default: cli config keypair]')
    parser.add_argument('--fee-payer', metavar='KEYPAIR',
                        help='Transaction fee payer account [default: cli config keypair]')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND', required=True)
    global_options = argparse.ArgumentParser(add_help=False)
    add_global_arguments(global_options, suppress=True)

    def add_command(name, **kwargs):
        return subparsers.add_parser(name, parents=[global_options], **kwargs)

    create_pool = add_command('create-pool', help='Create a new stake pool')
    create_pool.add_argument('-n', '--epoch-fee-numerator', type=int, required=True,
                             help='Epoch fee numerator, fee amount is numerator divided by denominator.')
    create_pool.add_argument('-d', '--epoch-fee-denominator', type=int, required=True,
                             help='Epoch fee denominator, fee amount is numerator divided by denominator.')
    create_pool.add_argument('--withdrawal-fee-numerator', type=int, default=0)
    create_pool.add_argument('--withdrawal-fee-denominator', type=int, default=0)
    create_pool.add_argument('--deposit-fee-numerator', type=int, default=0)
    create_pool.add_argument('--deposit-fee-denominator', type=int, default=0)
    create_pool.add_argument('--referral-fee', type=int, default=0,
                             help='Referral fee percentage, maximum 100')
    create_pool.add_argument('-m', '--max-validators', type=int, required=True,
                             help='Max number of validators included in the stake pool')
    create_pool.add_argument('-a', '--deposit-authority', metavar='KEYPAIR',
                             help='Deposit authority required to sign all deposits into the stake pool')
    create_pool.add_argument('-p', '--pool-keypair', metavar='KEYPAIR',
                             help='Stake pool keypair [default: new keypair]')
    create_pool.add_argument('--validator-list-keypair', metavar='KEYPAIR',
                             help='Validator list keypair [default: new keypair]')
    create_pool.add_argument('--mint-keypair', metavar='KEYPAIR',
                             help='Stake pool mint keypair [default: new keypair]')
    create_pool.add_argument('--reserve-keypair', metavar='KEYPAIR',
                             help='Stake pool reserve keypair [default: new keypair]')
    create_pool.add_argument('--unsafe-fees', action='store_true',
                             help='Bypass fee checks, allowing pool to be created with unsafe fees')

    for name, help_text in (
        ('add-validator', 'Add validator account to the stake pool. Must be signed by the pool staker.'),
        ('remove-validator', 'Remove validator account from the stake pool. Must be signed by the pool staker.'),
    ):
        validator = add_command(name, help=help_text)
        add_pool_argument(validator)
        validator.add_argument('vote_account', metavar='VOTE_ACCOUNT_ADDRESS', type=pubkey,
                               help='The validator vote account')

    for name, help_text in (
        ('increase-validator-stake',
         'Increase stake to a validator, drawing from the stake pool reserve. Must be signed by the pool staker.'),
        ('decrease-validator-stake',
         'Decrease stake to a validator, splitting from the active stake. Must be signed by the pool staker.'),
    ):
        move_stake = add_command(name, help=help_text)
        add_pool_argument(move_stake)
        move_stake.add_argument('vote_account', metavar='VOTE_ACCOUNT_ADDRESS', type=pubkey,
                                help='Vote account for the validator')
        move_stake.add_argument('amount', metavar='AMOUNT', type=float, nargs='?', default=0.0,
                                help='Amount in SOL to move')

    preferred = add_command(
        'set-preferred-validator',
        help='Set the preferred validator for deposits or withdrawals. Must be signed by the pool staker.')
    add_pool_argument(preferred)
    preferred.add_argument('preferred_type', choices=sorted(PREFERRED_VALIDATOR_TYPES),
                           help='Operation for which to restrict the validator')
    preferred_vote = preferred.add_mutually_exclusive_group(required=True)
    preferred_vote.add_argument('--vote-account', metavar='VOTE_ACCOUNT_ADDRESS', type=pubkey,
                                help='Vote account for the validator that users must deposit into')
    preferred_vote.add_argument('--unset', action='store_true',
                                help='Unset the preferred validator')

    deposit_stake = add_command(
        'deposit-stake', help='Deposit active stake account into the stake pool in exchange for pool tokens')
    add_pool_argument(deposit_stake)
    deposit_stake.add_argument('stake_account', metavar='STAKE_ACCOUNT_ADDRESS', type=pubkey,
                               help='Stake address to join the pool')
    deposit_stake.add_argument('--withdraw-authority', metavar='KEYPAIR',
                               help='Withdraw authority for the stake account to be deposited. '
                                    '[default: cli config keypair]')
    add_receiver_arguments(deposit_stake)

    deposit_sol = add_command(
        'deposit-sol', help='Deposit SOL into the stake pool in exchange for pool tokens')
    add_pool_argument(deposit_sol)
    deposit_sol.add_argument('amount', metavar='AMOUNT', type=float,
                             help='Amount in SOL to deposit into the stake pool reserve account.')
    deposit_sol.add_argument('--from', dest='from_keypair', metavar='KEYPAIR',
                             help='Source account of funds. [default: cli config keypair]')
    add_receiver_arguments(deposit_sol)

    list_pool = add_command('list', help='List stake accounts managed by this pool')
    add_pool_argument(list_pool)

    update = add_command(
        'update', help='Updates all balances in the pool after validator stake accounts receive rewards.')
    add_pool_argument(update)
    update.add_argument('--force', action='store_true',
                        help='Update all balances, even if it has already been performed this epoch.')
    update.add_argument('--no-merge', action='store_true',
                        help='Do not automatically merge transient stakes. '
                             'Useful if the stake pool is in an expected state, '
                             'but the balances still need to be updated.')

    withdraw_stake = add_command(
        'withdraw-stake', help='Withdraw active stake from the stake pool in exchange for pool tokens')
    add_pool_argument(withdraw_stake)
    withdraw_stake.add_argument('amount', metavar='AMOUNT', type=float,
                                help='Amount of pool tokens to withdraw for activated stake.')
    withdraw_stake.add_argument('--pool-account', metavar='ADDRESS', type=pubkey,
                                help='Pool token account to withdraw tokens from. '
                                     'Defaults to the token-owner\'s associated token account.')
    withdraw_stake.add_argument('--stake-receiver', metavar='STAKE_ACCOUNT_ADDRESS', type=pubkey,
                                help='Stake account from which to receive a stake from the stake pool. '
                                     'Defaults to a new stake account.')
    withdraw_source = withdraw_stake.add_mutually_exclusive_group()
    withdraw_source.add_argument('--vote-account', metavar='VOTE_ACCOUNT_ADDRESS', type=pubkey,
                                 help='Validator to withdraw from. '
                                      'Defaults to the validator with the most active stake.')
    withdraw_source.add_argument('--use-reserve', action='store_true',
                                 help='Withdraw from the stake pool\'s reserve. '
                                      'Only possible if all validator stakes are at the minimum possible amount.')

    withdraw_sol = add_command(
        'withdraw-sol', help='Withdraw SOL from the stake pool\'s reserve in exchange for pool tokens')
    add_pool_argument(withdraw_sol)
    withdraw_sol.add_argument('sol_receiver', metavar='SOL_RECEIVER', type=pubkey,
                              help='System account to receive SOL from the stake pool.')
    withdraw_sol.add_argument('amount', metavar='AMOUNT', type=float,
                              help='Amount of pool tokens to withdraw for SOL.')
    withdraw_sol.add_argument('--pool-account', metavar='ADDRESS', type=pubkey,
                              help='Pool token account to withdraw tokens from. '
                                   'Defaults to the token-owner\'s associated token account.')

    set_manager = add_command(
        'set-manager',
        help='Change manager or fee receiver account for the stake pool. Must be signed by the current manager.')
    add_pool_argument(set_manager)
    set_manager.add_argument('--new-manager', metavar='KEYPAIR',
                             help='Keypair for the new stake pool manager.')
    set_manager.add_argument('--new-fee-receiver', metavar='ADDRESS', type=pubkey,
                             help='Public key for the new account to set as the stake pool fee receiver.')

    set_staker = add_command(
        'set-staker', help='Change staker account for the stake pool. Must be signed by the manager.')
    add_pool_argument(set_staker)
    set_staker.add_argument('new_staker', metavar='ADDRESS', type=pubkey,
                            help='Public key for the new stake pool staker.')

    set_funding_authority = add_command(
        'set-funding-authority',
        help='Change one of the funding authorities for the stake pool. Must be signed by the manager.')
    add_pool_argument(set_funding_authority)
    set_funding_authority.add_argument('funding_type', choices=sorted(FUNDING_TYPES),
                                       help='Funding type to be updated.')
    new_authority = set_funding_authority.add_mutually_exclusive_group(required=True)
    new_authority.add_argument('new_authority', metavar='AUTHORITY_ADDRESS', type=pubkey, nargs='?',
                               help='Public key for the new stake pool funding authority.')
    new_authority.add_argument('--unset', action='store_true',
                               help='Unset the funding authority, so anyone can fund the pool')

    set_fee = add_command(
        'set-fee', help='Change the fee assessed by the stake pool. Must be signed by the manager.')
    add_pool_argument(set_fee)
    set_fee.add_argument('fee_type', choices=sorted(FEE_TYPES), help='Type of fee to update.')
    set_fee.add_argument('fee_numerator', metavar='FEE_NUMERATOR', type=int,
                         help='Fee numerator, fee amount is numerator divided by denominator.')
    set_fee.add_argument('fee_denominator', metavar='FEE_DENOMINATOR', type=int,
                         help='Fee denominator, fee amount is numerator divided by denominator.')

    set_referral_fee = add_command(
        'set-referral-fee',
        help='Change the referral fee assessed by the stake pool for deposits. Must be signed by the manager.')
    add_pool_argument(set_referral_fee)
    set_referral_fee.add_argument('fee_type', choices=sorted(REFERRAL_FEE_TYPES),
                                  help='Fee type to be updated.')
    set_referral_fee.add_argument('fee', metavar='FEE_PERCENTAGE', type=int,
                                  help='Fee percentage, maximum 100')

    return parser


def optional_keypair(path: Optional[str]):
    return keypair_from_file(path) if path else None


def build_config(args: argparse.Namespace) -> Config:
    cli_config = load_cli_config(args.config_file)
    json_rpc_url = args.json_rpc_url or cli_config.json_rpc_url
    # signers load before the client is opened
    manager = get_signer(args.manager, cli_config.keypair_path)
    staker = get_signer(args.staker, cli_config.keypair_path)
    funding_authority = optional_keypair(args.funding_authority)
    token_owner = get_signer(args.token_owner, cli_config.keypair_path)
    fee_payer = get_signer(args.fee_payer, cli_config.keypair_path)
    return Config(
        client=new_client(json_rpc_url),
        manager=manager,
        staker=staker,
        funding_authority=funding_authority,
        token_owner=token_owner,
        fee_payer=fee_payer,
        verbose=args.verbose,
        output_format=args.output_format,
        dry_run=args.dry_run,
        no_update=args.no_update,
    )


async def run_command(config: Config, args: argparse.Namespace):
    command = args.command
    if command == 'create-pool':
        await command_create_pool(
            config,
            deposit_authority=optional_keypair(args.deposit_authority),
            epoch_fee=Fee(numerator=args.epoch_fee_numerator, denominator=args.epoch_fee_denominator),
            withdrawal_fee=Fee(numerator=args.withdrawal_fee_numerator, denominator=args.withdrawal_fee_denominator),
            deposit_fee=Fee(numerator=args.deposit_fee_numerator, denominator=args.deposit_fee_denominator),
            referral_fee=args.referral_fee,
            max_validators=args.max_validators,
            stake_pool_keypair=optional_keypair(args.pool_keypair),
            validator_list_keypair=optional_keypair(args.validator_list_keypair),
            mint_keypair=optional_keypair(args.mint_keypair),
            reserve_keypair=optional_keypair(args.reserve_keypair),
            unsafe_fees=args.unsafe_fees,
        )
    elif command == 'add-validator':
        await command_add_validator(config, args.pool, args.vote_account)
    elif command == 'remove-validator':
        await command_remove_validator(config, args.pool, args.vote_account)
    elif command == 'increase-validator-stake':
        await command_increase_validator_stake(config, args.pool, args.vote_account, args.amount)
    elif command == 'decrease-validator-stake':
        await command_decrease_validator_stake(config, args.pool, args.vote_account, args.amount)
    elif command == 'set-preferred-validator':
        await command_set_preferred_validator(
            config, args.pool, PREFERRED_VALIDATOR_TYPES[args.preferred_type], args.vote_account)
    elif command == 'deposit-stake':
        withdraw_authority = optional_keypair(args.withdraw_authority) or config.fee_payer
        await command_deposit_stake(
            config, args.pool, args.stake_account, withdraw_authority, args.token_receiver, args.referrer)
    elif command == 'deposit-sol':
        await command_deposit_sol(
            config, args.pool, args.amount, optional_keypair(args.from_keypair), args.token_receiver, args.referrer)
    elif command == 'list':
        await command_list(config, args.pool)
    elif command == 'update':
        await command_update(config, args.pool, args.force, args.no_merge)
    elif command == 'withdraw-stake':
        await command_withdraw_stake(
            config, args.pool, args.amount, args.pool_account, args.vote_account, args.use_reserve,
            args.stake_receiver)
    elif command == 'withdraw-sol':
        await command_withdraw_sol(config, args.pool, args.sol_receiver, args.amount, args.pool_account)
    elif command == 'set-manager':
        await command_set_manager(config, args.pool, optional_keypair(args.new_manager), args.new_fee_receiver)
    elif command == 'set-staker':
        await command_set_staker(config, args.pool, args.new_staker)
    elif command == 'set-funding-authority':
        await command_set_funding_authority(config, args.pool, FUNDING_TYPES[args.funding_type], args.new_authority)
    elif command == 'set-fee':
        fee = Fee(numerator=args.fee_numerator, denominator=args.fee_denominator)
        await command_set_fee(config, args.pool, FEE_TYPES[args.fee_type], fee)
    elif command == 'set-referral-fee':
        await command_set_referral_fee(config, args.pool, REFERRAL_FEE_TYPES[args.fee_type], args.fee)


async def run(args: argparse.Namespace):
    config = build_config(args)
    try:
        await run_command(config, args)
    finally:
        await config.client.close()


def check_args(parser: argparse.ArgumentParser, args: argparse.Namespace):
    if args.command == 'withdraw-stake' and args.stake_receiver and not (args.vote_account or args.use_reserve):
        parser.error('--stake-receiver requires --vote-account or --use-reserve')


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    check_args(parser, args)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    try:
        asyncio.run(run(args))
    except Exception as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
