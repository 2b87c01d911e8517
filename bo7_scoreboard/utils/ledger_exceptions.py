"""
Custom exceptions for the score ledger with user-friendly error messages.
"""

class LedgerException(Exception):
    """Base exception for ledger-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class InvalidRankError(LedgerException):
    """Raised when a rank name is not part of the catalog."""
    def __init__(self, rank: str, available=()):
        self.rank = rank
        listing = ", ".join(available)
        super().__init__(
            f"Invalid rank '{rank}'",
            f"❌ Invalid rank. Available ranks: {listing}" if listing else "❌ Invalid rank."
        )

class InvalidWinnerError(LedgerException):
    """Raised when the declared winner is not one of the match participants."""
    def __init__(self, winner_id: str, reason: str = None):
        self.winner_id = winner_id
        super().__init__(
            f"Invalid winner {winner_id}: {reason or 'not a participant'}",
            f"❌ {reason or 'The winner must be one of the two players.'}"
        )

class InvalidValueError(LedgerException):
    """Raised when a count or score is outside its allowed range."""
    def __init__(self, value, reason: str):
        self.value = value
        super().__init__(
            f"Invalid value {value}: {reason}",
            f"❌ {reason}"
        )

class NothingToRemoveError(LedgerException):
    """Raised when removing a win from a counter that is already zero."""
    def __init__(self, user_id: str, rank: str):
        self.user_id = user_id
        self.rank = rank
        super().__init__(
            f"User {user_id} has no wins to remove in {rank}",
            f"❌ There are no wins to remove in {rank}."
        )

class BackupNotFoundError(LedgerException):
    """Raised when a referenced backup no longer exists."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Backup '{name}' not found",
            f"❌ Backup `{name}` was not found. Use `backups` to list the available ones."
        )

class StorageReadError(LedgerException):
    """Raised when the ledger document cannot be read or parsed."""
    def __init__(self, path, details: str = None):
        self.path = path
        super().__init__(
            f"Could not read ledger from {path}: {details}",
            "❌ The scoreboard data could not be read. Please try again later."
        )

class StorageWriteError(LedgerException):
    """Raised when the ledger could not be persisted."""
    def __init__(self, path, attempts: int = 1):
        self.path = path
        self.attempts = attempts
        super().__init__(
            f"Could not write ledger to {path} after {attempts} attempt(s)",
            "❌ Failed to save the scoreboard. Please try again."
        )
