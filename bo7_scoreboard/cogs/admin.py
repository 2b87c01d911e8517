import discord
from discord import app_commands
from discord.ext import commands
from datetime import datetime, timezone

from bo7_scoreboard.cogs.scoreboard import rank_autocomplete
from bo7_scoreboard.utils.embeds import build_backups_embed
from bo7_scoreboard.utils.error_embeds import ErrorEmbeds
from bo7_scoreboard.utils.ledger_exceptions import LedgerException
from bo7_scoreboard.utils.permissions import has_admin_role
import logging

logger = logging.getLogger(__name__)

class AdminCog(commands.Cog):
    """Admin-only commands for editing the scoreboard and managing backups"""

    def __init__(self, bot):
        self.bot = bot
        self.ledger = bot.app.ledger
        self.config = bot.app.config
        self.logger = logger

    async def cog_check(self, ctx):
        """Check if user holds the configured admin role"""
        return has_admin_role(ctx.author, self.config.admin_role_name)

    def _audit(self, ctx, action: str):
        self.logger.info(f"Admin {action} by {ctx.author.id} ({ctx.author.name})")

    @commands.hybrid_command(name='addwin', description="Add a win for a player in a rank (Admin only)")
    @app_commands.describe(user="Player to credit", rank="Rank of the win")
    @app_commands.autocomplete(rank=rank_autocomplete)
    async def add_win(self, ctx: commands.Context, user: discord.User, *, rank: str):
        """Add a win for a user in the specified rank"""
        try:
            count = await self.ledger.add_win(str(user.id), rank)
        except LedgerException as e:
            await ctx.reply(embed=ErrorEmbeds.from_exception(e))
            return

        self._audit(ctx, f"addwin {user.id}")
        await ctx.reply(f"Added a win for {user.display_name}. They now have {count} wins.")

    @commands.hybrid_command(name='removewin', description="Remove a win from a player in a rank (Admin only)")
    @app_commands.describe(user="Player to adjust", rank="Rank of the win")
    @app_commands.autocomplete(rank=rank_autocomplete)
    async def remove_win(self, ctx: commands.Context, user: discord.User, *, rank: str):
        """Remove a win from a user in the specified rank"""
        try:
            count = await self.ledger.remove_win(str(user.id), rank)
        except LedgerException as e:
            await ctx.reply(embed=ErrorEmbeds.from_exception(e))
            return

        self._audit(ctx, f"removewin {user.id}")
        await ctx.reply(f"Removed a win from {user.display_name}. They now have {count} wins.")

    @commands.hybrid_command(name='setwins', description="Set a player's wins in a rank (Admin only)")
    @app_commands.describe(user="Player to adjust", rank="Rank to set", wins="New win count (0 or higher)")
    @app_commands.autocomplete(rank=rank_autocomplete)
    async def set_wins(self, ctx: commands.Context, user: discord.User, rank: str, wins: int):
        """Set the wins for a user in the specified rank"""
        try:
            count = await self.ledger.set_wins(str(user.id), rank, wins)
        except LedgerException as e:
            await ctx.reply(embed=ErrorEmbeds.from_exception(e))
            return

        self._audit(ctx, f"setwins {user.id}={count}")
        await ctx.reply(f"Set {user.display_name}'s wins to {count}.")

    @commands.hybrid_command(name='backup', description="Create a scoreboard backup now (Admin only)")
    async def backup(self, ctx: commands.Context):
        """Create a backup of the scores file"""
        entry = await self.ledger.create_backup()
        if entry is None:
            await ctx.reply(embed=ErrorEmbeds.command_error("No backup was created. Is there any data yet?"))
            return

        self._audit(ctx, "backup")
        embed = discord.Embed(
            title="✅ Backup Created",
            description=f"`{entry.name}`",
            color=discord.Color.green(),
            timestamp=datetime.now(timezone.utc)
        )
        await ctx.reply(embed=embed)

    @commands.hybrid_command(name='backups', description="List scoreboard backups (Admin only)")
    async def backups(self, ctx: commands.Context):
        """List available backups, newest first"""
        entries = await self.ledger.list_backups()
        await ctx.reply(embed=build_backups_embed(entries))

    @commands.hybrid_command(name='restore', description="Restore the scoreboard from a backup (Admin only)")
    @app_commands.describe(backup="Backup number from the backups list, or its file name")
    async def restore(self, ctx: commands.Context, backup: str):
        """Restore the scores file from a backup"""
        name = backup.strip()
        if name.isdigit():
            entries = await self.ledger.list_backups()
            index = int(name)
            if not 1 <= index <= len(entries):
                await ctx.reply(embed=ErrorEmbeds.invalid_input(
                    f"Backup number must be between 1 and {len(entries)}." if entries else "No backups available."
                ))
                return
            name = entries[index - 1].name

        try:
            restored = await self.ledger.restore_backup(name)
        except LedgerException as e:
            await ctx.reply(embed=ErrorEmbeds.from_exception(e))
            return

        if not restored:
            await ctx.reply(embed=ErrorEmbeds.command_error(
                f"Could not restore `{name}`. The backup is unreadable or storage is unavailable; "
                "the scoreboard was not changed."
            ))
            return

        self._audit(ctx, f"restore {name}")
        embed = discord.Embed(
            title="✅ Scoreboard Restored",
            description=f"Restored from `{name}`. The previous data was saved as a pre-restore backup.",
            color=discord.Color.green(),
            timestamp=datetime.now(timezone.utc)
        )
        await ctx.reply(embed=embed)

async def setup(bot):
    await bot.add_cog(AdminCog(bot))
