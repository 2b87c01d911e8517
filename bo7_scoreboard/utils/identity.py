"""
Display name lookup for ledger user ids.

Resolution order: guild member, user cache, Discord API, names captured on
match records, then a placeholder.
"""

import logging
from typing import Dict, Iterable, Optional

import discord

from bo7_scoreboard.constants import UIConstants

logger = logging.getLogger(__name__)


async def resolve_display_names(
    bot: discord.Client,
    guild: Optional[discord.Guild],
    user_ids: Iterable[str],
    recorded: Optional[Dict[str, str]] = None
) -> Dict[str, str]:
    names: Dict[str, str] = {}
    recorded = recorded or {}

    for user_id in user_ids:
        if user_id in names:
            continue
        try:
            snowflake = int(user_id)
        except ValueError:
            names[user_id] = recorded.get(user_id, UIConstants.UNKNOWN_USER)
            continue

        member = guild.get_member(snowflake) if guild else None
        if member is not None:
            names[user_id] = member.display_name
            continue

        user = bot.get_user(snowflake)
        if user is None:
            try:
                user = await bot.fetch_user(snowflake)
            except discord.NotFound:
                user = None
            except discord.HTTPException as e:
                logger.warning(f"Could not fetch user {user_id}: {e}")
                user = None

        if user is not None:
            names[user_id] = user.name
        else:
            names[user_id] = recorded.get(user_id, UIConstants.UNKNOWN_USER)

    return names
