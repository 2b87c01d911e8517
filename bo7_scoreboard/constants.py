"""
Bot-wide constants for the BO7 Scoreboard bot.

Collects the display limits, backup defaults and UI values used by the cogs
and the storage layer so they are defined in one place.
"""

class PaginationConstants:
    """Constants for leaderboard and history displays."""

    # Entries shown by the leaderboard and overview embeds
    LEADERBOARD_DISPLAY_SIZE = 10

    # Match history defaults
    DEFAULT_HISTORY_LIMIT = 5
    MAX_HISTORY_LIMIT = 25

    # Discord caps embeds at 25 fields
    MAX_EMBED_FIELDS = 25

class BackupConstants:
    """Constants for ledger backups."""

    DEFAULT_MAX_BACKUPS = 5
    DEFAULT_INTERVAL_HOURS = 24

    # Labels embedded in backup file names
    SCHEDULED_LABEL = "backup"
    PRE_RESTORE_LABEL = "pre-restore"

    # Attempts made by the service before a save failure is surfaced
    SAVE_RETRIES = 3

class MatchConstants:
    """Constants for best-of-7 match reports."""

    MIN_WINNER_SCORE = 1
    MAX_WINNER_SCORE = 7
    MIN_LOSER_SCORE = 0
    MAX_LOSER_SCORE = 6

    # Cooldown for player-submitted reports (uses per seconds)
    REPORT_COOLDOWN_RATE = 1
    REPORT_COOLDOWN_SECONDS = 30.0

class UIConstants:
    """Constants for Discord UI elements."""

    # Embed colors
    DEFAULT_EMBED_COLOR = 0x0099ff  # Blue
    GOLD_COLOR = 0xffd700          # Leaderboards
    ERROR_COLOR = 0xe74c3c         # Red for errors
    SUCCESS_COLOR = 0x2ecc71       # Green for success

    FOOTER_TEXT = "BO7-Scoreboard Bot"
    UNKNOWN_USER = "Unknown user"

    TROPHY_EMOJI = "🏆"
    SWORDS_EMOJI = "⚔️"
