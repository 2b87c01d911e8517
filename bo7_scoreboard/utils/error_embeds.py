"""
Centralized error embeds for consistent error handling across the scoreboard bot.

Provides standardized error messages and formatting to maintain consistency
and improve user experience when errors occur.
"""

import discord

from bo7_scoreboard.utils.ledger_exceptions import LedgerException


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""

    @staticmethod
    def from_exception(error: LedgerException) -> discord.Embed:
        """Create embed carrying a ledger exception's user-facing message."""
        return discord.Embed(
            title="Invalid Request",
            description=error.user_message,
            color=discord.Color.red()
        )

    @staticmethod
    def command_error(error: str) -> discord.Embed:
        """Create embed for general command errors."""
        return discord.Embed(
            title="Command Error",
            description=f"An error occurred: {error}\n\nPlease try again or contact an administrator.",
            color=discord.Color.red()
        )

    @staticmethod
    def invalid_input(message: str) -> discord.Embed:
        """Create embed for invalid user input."""
        return discord.Embed(
            title="Invalid Input",
            description=message,
            color=discord.Color.red()
        )

    @staticmethod
    def permission_denied() -> discord.Embed:
        """Create embed for permission errors."""
        return discord.Embed(
            title="Permission Denied",
            description="You do not have permission to use this command.",
            color=discord.Color.red()
        )

    @staticmethod
    def no_match_history() -> discord.Embed:
        """Create embed for when there are no recorded matches."""
        return discord.Embed(
            title="No Match History",
            description="No matches have been recorded yet.",
            color=discord.Color.orange()
        )

    @staticmethod
    def storage_error() -> discord.Embed:
        """Create embed for storage failures."""
        return discord.Embed(
            title="Storage Error",
            description="The scoreboard could not be saved. Please try again later or contact an administrator.",
            color=discord.Color.red()
        )
