"""
MyToken Exceptions

Custom exception classes for the local chain and the upgrades tooling.
"""


class MyTokenException(Exception):
    """Base exception for MyToken."""
    pass


class TransactionReverted(MyTokenException):
    """A transaction or call reverted; all of its state changes were discarded."""

    def __init__(self, reason: str = "", tx_hash: str = ""):
        self.reason = reason
        self.tx_hash = tx_hash
        message = f"Transaction reverted: {reason}" if reason else "Transaction reverted without a reason"
        super().__init__(message)


class InvalidAddressError(MyTokenException):
    """Invalid address format."""
    pass


class ContractNotFoundError(MyTokenException):
    """No contract code at the given address, or unknown artifact name."""
    pass


class UpgradeError(MyTokenException):
    """Proxy deployment or upgrade validation failed."""
    pass


class ConfigurationError(MyTokenException):
    """Configuration error."""
    pass
