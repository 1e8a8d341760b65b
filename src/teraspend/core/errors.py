"""
Error taxonomy for the UTXO record module.

Every error carries a short code and a message. ``str(error)`` is the exact
text handed back to the caller when a call fails.
"""

# Validation error codes
TX_NOT_FOUND = "TX_NOT_FOUND"
LOCKED = "LOCKED"
CREATING = "CREATING"
CONFLICTING = "CONFLICTING"
FROZEN = "FROZEN"
ALREADY_FROZEN = "ALREADY_FROZEN"
FROZEN_UNTIL = "FROZEN_UNTIL"
COINBASE_IMMATURE = "COINBASE_IMMATURE"
SPENT = "SPENT"
UTXO_NOT_SPENT = "UTXO_NOT_SPENT"
UTXO_NOT_FROZEN = "UTXO_NOT_FROZEN"
UTXO_NOT_FOUND = "UTXO_NOT_FOUND"
INVALID_PARAMETER = "INVALID_PARAMETER"
INVALID_RECORD = "INVALID_RECORD"

# Messages
MSG_TX_NOT_FOUND = "TX not found"
MSG_LOCKED = "TX is locked and cannot be spent"
MSG_CREATING = "TX is being created and cannot be spent yet"
MSG_CONFLICTING = "TX is conflicting"
MSG_FROZEN = "UTXO is frozen"
MSG_ALREADY_FROZEN = "UTXO is already frozen"
MSG_FROZEN_UNTIL = "UTXO is not spendable until block "
MSG_COINBASE_IMMATURE = "Coinbase UTXO can only be spent when it matures"
MSG_SPENT = "Already spent by "
MSG_NOT_SPENT = "UTXO is not spent"
MSG_NOT_FROZEN = "UTXO is not frozen"
MSG_UTXO_NOT_FOUND = "UTXO not found for offset "


class TeraspendError(Exception):
    """Base exception for every failure raised by the module."""

    code = "ERROR"

    def __init__(self, message: str, code: str = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class InputError(TeraspendError):
    """Exception raised when the entry point is called without a function name."""

    code = "INPUT"

    def __init__(self, message: str = "function name required"):
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class DispatchError(TeraspendError):
    """Exception raised when a function name has no registered handler."""

    code = "DISPATCH"

    def __init__(self, function_name: str):
        self.function_name = function_name
        super().__init__(f"unknown function: {function_name}")

    def __str__(self) -> str:
        return self.message


class ValidationError(TeraspendError):
    """Exception raised when a precondition does not hold for the record."""

    def __init__(self, code: str, message: str):
        super().__init__(message, code=code)


class InternalError(TeraspendError):
    """Exception raised when the module itself fails while handling a call."""

    code = "INTERNAL"
