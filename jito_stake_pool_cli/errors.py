"""Errors raised by the stake pool command line client."""


class StakePoolCliError(Exception):
    """Base class for errors reported to the user with exit code 1."""


class ConfigError(StakePoolCliError):
    """Configuration file or keypair could not be loaded."""


class AccountNotFoundError(StakePoolCliError):
    def __init__(self, address):
        super().__init__(f"AccountNotFound: pubkey={address}")
        self.address = address


class DeserializationError(StakePoolCliError):
    """Account data does not match the expected layout."""


class InsufficientFundsError(StakePoolCliError):
    """An account cannot cover the lamports required by a command."""
