"""
Scoreboard Cog - public stats, leaderboards, history and match reports
"""

import discord
from discord import app_commands
from discord.ext import commands
from typing import List, Optional

from bo7_scoreboard.constants import MatchConstants, PaginationConstants
from bo7_scoreboard.data_models.ledger import PlayerRef
from bo7_scoreboard.utils.embeds import (
    build_help_embed, build_history_embed, build_leaderboard_embed,
    build_match_recorded_embed, build_overview_embed, build_ranks_embed, build_stats_embed
)
from bo7_scoreboard.utils.error_embeds import ErrorEmbeds
from bo7_scoreboard.utils.identity import resolve_display_names
from bo7_scoreboard.utils.ledger_exceptions import LedgerException
from bo7_scoreboard.utils.permissions import has_admin_role
from bo7_scoreboard.utils.ranks import RANKS, normalize_rank
import logging

logger = logging.getLogger(__name__)


async def rank_autocomplete(interaction: discord.Interaction, current: str) -> List[app_commands.Choice[str]]:
    """Provide rank name suggestions."""
    return [
        app_commands.Choice(name=rank, value=rank)
        for rank in RANKS
        if current.lower() in rank.lower()
    ][:25]


class ScoreboardCog(commands.Cog):
    """Stats, leaderboards and best-of-7 reporting"""

    def __init__(self, bot):
        self.bot = bot
        self.ledger = bot.app.ledger
        self.config = bot.app.config

    async def _names_for(self, ctx: commands.Context, user_ids: List[str]):
        recorded = await self.ledger.known_usernames(user_ids)
        return await resolve_display_names(self.bot, ctx.guild, user_ids, recorded)

    @commands.hybrid_command(name="help", description="Show the scoreboard commands")
    async def help(self, ctx: commands.Context):
        """Show the command list"""
        await ctx.reply(embed=build_help_embed(self.config.command_prefix))

    @commands.hybrid_command(name="ranks", description="List the ranks a match can be played at")
    async def ranks(self, ctx: commands.Context):
        """List the rank catalog"""
        await ctx.reply(embed=build_ranks_embed())

    @commands.hybrid_command(name="stats", description="Show a player's wins per rank")
    @app_commands.describe(user="The player to show (defaults to you)")
    async def stats(self, ctx: commands.Context, user: Optional[discord.User] = None):
        """Show stats for a user (or yourself)"""
        target = user or ctx.author
        stats = await self.ledger.stats_for(str(target.id))
        embed = build_stats_embed(stats, target.display_name, target.display_avatar.url)
        await ctx.reply(embed=embed)

    @commands.hybrid_command(name="leaderboard", description="Show the overall or per-rank leaderboard")
    @app_commands.describe(rank="Limit the leaderboard to one rank")
    @app_commands.autocomplete(rank=rank_autocomplete)
    async def leaderboard(self, ctx: commands.Context, *, rank: Optional[str] = None):
        """Show leaderboard for all ranks or a specific rank"""
        try:
            rank = normalize_rank(rank) if rank else None
            entries = await self.ledger.leaderboard(rank, PaginationConstants.LEADERBOARD_DISPLAY_SIZE)
        except LedgerException as e:
            await ctx.reply(embed=ErrorEmbeds.from_exception(e))
            return

        names = await self._names_for(ctx, [entry.user_id for entry in entries])
        await ctx.reply(embed=build_leaderboard_embed(entries, names, rank))

    @commands.hybrid_command(name="overview", description="Show every player's wins across all ranks")
    async def overview(self, ctx: commands.Context):
        """Show the per-rank breakdown for every player with wins"""
        entries = await self.ledger.overview(PaginationConstants.MAX_EMBED_FIELDS)
        names = await self._names_for(ctx, [entry.user_id for entry in entries])
        await ctx.reply(embed=build_overview_embed(entries, names))

    @commands.hybrid_command(name="history", description="Show recent best-of-7 results")
    @app_commands.describe(user="Only matches this player played in", limit="How many matches to show")
    async def history(self, ctx: commands.Context, user: Optional[discord.User] = None,
                      limit: commands.Range[int, 1, PaginationConstants.MAX_HISTORY_LIMIT] = PaginationConstants.DEFAULT_HISTORY_LIMIT):
        """Show the most recent matches"""
        matches = await self.ledger.match_history(str(user.id) if user else None, limit)
        if not matches:
            await ctx.reply(embed=ErrorEmbeds.no_match_history())
            return
        await ctx.reply(embed=build_history_embed(matches, user.display_name if user else None))

    @commands.hybrid_command(name="report", description="Record a best-of-7 result")
    @app_commands.describe(
        player1="First player",
        player2="Second player",
        rank="Rank the match was played at",
        winner="Player who won the series",
        winner_score="Games won by the winner (1-7)",
        loser_score="Games won by the loser (0-6)"
    )
    @app_commands.autocomplete(rank=rank_autocomplete)
    @commands.cooldown(MatchConstants.REPORT_COOLDOWN_RATE, MatchConstants.REPORT_COOLDOWN_SECONDS, commands.BucketType.user)
    async def report(self, ctx: commands.Context, player1: discord.User, player2: discord.User, rank: str,
                     winner: discord.User, winner_score: int, loser_score: int):
        """Record a best-of-7 result and credit the winner"""
        is_admin = has_admin_role(ctx.author, self.config.admin_role_name)
        if not is_admin:
            if not self.config.allow_player_reports:
                await ctx.reply(embed=ErrorEmbeds.permission_denied())
                return
            if ctx.author.id not in (player1.id, player2.id):
                await ctx.reply(embed=ErrorEmbeds.invalid_input("You can only report matches you played in."))
                return

        try:
            record, wins = await self.ledger.record_match(
                PlayerRef(str(player1.id), player1.display_name),
                PlayerRef(str(player2.id), player2.display_name),
                rank,
                str(winner.id),
                winner_score,
                loser_score
            )
        except LedgerException as e:
            await ctx.reply(embed=ErrorEmbeds.from_exception(e))
            return

        logger.info(f"Match reported by {ctx.author.id} ({ctx.author.name})")
        await ctx.reply(embed=build_match_recorded_embed(record, wins))


async def setup(bot):
    await bot.add_cog(ScoreboardCog(bot))
