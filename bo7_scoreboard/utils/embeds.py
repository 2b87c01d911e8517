"""
Shared embed utilities for the scoreboard bot.

Provides reusable embed building functions to maintain consistency
and reduce code duplication across cogs. Callers resolve user ids to
display names first and pass them in as a mapping.
"""

import discord
from typing import Dict, List, Optional

from bo7_scoreboard.constants import PaginationConstants, UIConstants
from bo7_scoreboard.data_models.ledger import (
    BackupEntry, LeaderboardEntry, MatchRecord, OverviewEntry, UserStats, parse_iso
)
from bo7_scoreboard.utils.ranks import RANKS, RANK_ALIASES


def _name(names: Dict[str, str], user_id: str) -> str:
    return names.get(user_id, UIConstants.UNKNOWN_USER)


def build_stats_embed(stats: UserStats, display_name: str, avatar_url: Optional[str] = None) -> discord.Embed:
    """
    Build the per-rank stats embed for one user.

    Args:
        stats: Win counts for every rank
        display_name: Name shown in the title
        avatar_url: Thumbnail, omitted when None

    Returns:
        Embed with one inline field per rank plus the total
    """
    embed = discord.Embed(
        title=f"Stats for {display_name}",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    if avatar_url:
        embed.set_thumbnail(url=avatar_url)

    for rank in RANKS:
        embed.add_field(name=rank, value=f"{stats.wins[rank]} wins", inline=True)
    embed.add_field(name="Total", value=f"**{stats.total}** wins", inline=False)
    embed.set_footer(text=UIConstants.FOOTER_TEXT)
    return embed


def build_leaderboard_embed(entries: List[LeaderboardEntry], names: Dict[str, str],
                            rank: Optional[str] = None) -> discord.Embed:
    """Build the overall or single-rank leaderboard embed."""
    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} Leaderboard for {rank}" if rank else f"{UIConstants.TROPHY_EMOJI} Overall Leaderboard",
        color=UIConstants.GOLD_COLOR
    )

    if not entries:
        embed.description = "No scores for this rank yet." if rank else "No scores recorded yet."
    else:
        suffix = "wins" if rank else "total wins"
        embed.description = "\n".join(
            f"**{entry.position}.** {_name(names, entry.user_id)}: {entry.wins} {suffix}"
            for entry in entries
        )

    embed.set_footer(text=UIConstants.FOOTER_TEXT)
    return embed


def build_overview_embed(entries: List[OverviewEntry], names: Dict[str, str]) -> discord.Embed:
    """Build the all-ranks overview with a compact breakdown per user."""
    embed = discord.Embed(
        title="📊 Scoreboard Overview",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )

    if not entries:
        embed.description = "No scores recorded yet."
        embed.set_footer(text=UIConstants.FOOTER_TEXT)
        return embed

    for entry in entries[:PaginationConstants.MAX_EMBED_FIELDS]:
        breakdown = ", ".join(f"{rank}: {count}" for rank, count in entry.wins.items() if count > 0)
        embed.add_field(
            name=f"{entry.position}. {_name(names, entry.user_id)} ({entry.total} wins)",
            value=breakdown,
            inline=False
        )

    embed.set_footer(text=f"{UIConstants.FOOTER_TEXT} | Players: {len(entries)}")
    return embed


def format_match_line(match: MatchRecord) -> str:
    played = parse_iso(match.date)
    when = discord.utils.format_dt(played, style="d") if played else "unknown date"
    return (
        f"{UIConstants.SWORDS_EMOJI} **{match.winner.username}** def. **{match.loser.username}** "
        f"{match.winner_score}-{match.loser_score} ({match.rank}) - {when}"
    )


def build_history_embed(matches: List[MatchRecord], subject: Optional[str] = None) -> discord.Embed:
    """Build the recent matches embed, newest first."""
    embed = discord.Embed(
        title=f"Match History for {subject}" if subject else "Recent Matches",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    if matches:
        embed.description = "\n".join(format_match_line(match) for match in matches)
    else:
        embed.description = "No matches have been recorded yet."
    embed.set_footer(text=UIConstants.FOOTER_TEXT)
    return embed


def build_match_recorded_embed(match: MatchRecord, new_count: int) -> discord.Embed:
    embed = discord.Embed(
        title="✅ Match Recorded",
        description=format_match_line(match),
        color=UIConstants.SUCCESS_COLOR
    )
    embed.add_field(
        name=f"{match.winner.username} in {match.rank}",
        value=f"{new_count} wins",
        inline=False
    )
    return embed


def build_backups_embed(entries: List[BackupEntry]) -> discord.Embed:
    """List backups newest first with the index used by the restore command."""
    embed = discord.Embed(
        title="🗄️ Backups",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    if not entries:
        embed.description = "No backups available."
        return embed

    embed.description = "\n".join(
        f"**{index}.** `{entry.name}` - {discord.utils.format_dt(entry.created_at, style='R')}"
        f" ({entry.size:,} bytes){' [pre-restore]' if entry.is_pre_restore else ''}"
        for index, entry in enumerate(entries, start=1)
    )
    embed.set_footer(text="Restore with: restore <number or file name>")
    return embed


def build_ranks_embed() -> discord.Embed:
    aliases = {rank: alias for alias, rank in RANK_ALIASES.items()}
    embed = discord.Embed(
        title="Ranks",
        description="\n".join(
            f"**{index}.** {rank}" + (f" (`{aliases[rank]}`)" if rank in aliases else "")
            for index, rank in enumerate(RANKS, start=1)
        ),
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    embed.set_footer(text="Rank names are case-insensitive; use _ or an alias for multi-word ranks.")
    return embed


def build_help_embed(prefix: str) -> discord.Embed:
    embed = discord.Embed(
        title="BO7-Scoreboard Bot Help",
        description="List of available commands:",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    embed.add_field(name=f"{prefix}help", value="Shows this help message", inline=False)
    embed.add_field(name=f"{prefix}ranks", value="Lists the ranks and their short aliases", inline=False)
    embed.add_field(name=f"{prefix}stats [user]", value="Shows stats for a user (or yourself if no user is specified)", inline=False)
    embed.add_field(name=f"{prefix}leaderboard [rank]", value="Shows leaderboard for all ranks or a specific rank", inline=False)
    embed.add_field(name=f"{prefix}overview", value="Shows every player's wins broken down by rank", inline=False)
    embed.add_field(name=f"{prefix}history [user] [limit]", value="Shows the most recent matches", inline=False)
    embed.add_field(
        name=f"{prefix}report <player1> <player2> <rank> <winner> <winner score> <loser score>",
        value="Records a best-of-7 result and credits the winner",
        inline=False
    )
    embed.add_field(name="**Admin Commands**", value="The following commands require admin privileges:", inline=False)
    embed.add_field(name=f"{prefix}addwin <user> <rank>", value="Adds a win for a user in the specified rank", inline=False)
    embed.add_field(name=f"{prefix}removewin <user> <rank>", value="Removes a win for a user in the specified rank", inline=False)
    embed.add_field(name=f"{prefix}setwins <user> <rank> <wins>", value="Sets the wins for a user in the specified rank to a specific value", inline=False)
    embed.add_field(name=f"{prefix}backup / {prefix}backups / {prefix}restore <backup>", value="Creates, lists and restores scoreboard backups", inline=False)
    embed.set_footer(text=UIConstants.FOOTER_TEXT)
    return embed
