"""
Housekeeping Cog - Background Tasks

Takes scheduled scoreboard backups and logs a periodic heartbeat so
hosting platforms see the process as active.
"""

from discord.ext import commands, tasks
from datetime import datetime, timezone

import logging

logger = logging.getLogger(__name__)


class HousekeepingCog(commands.Cog):
    """Background maintenance tasks"""

    def __init__(self, bot):
        self.bot = bot
        self.ledger = bot.app.ledger
        self.config = bot.app.config
        self.logger = logger

    async def cog_load(self):
        """Apply configured intervals and start background tasks"""
        self.scheduled_backup.change_interval(hours=self.config.backup_interval_hours)
        self.heartbeat.change_interval(minutes=self.config.keepalive_interval_minutes)
        self.scheduled_backup.start()
        self.heartbeat.start()
        self.logger.info("HousekeepingCog: Background tasks started")

    async def cog_unload(self):
        """Stop background tasks when cog is unloaded"""
        self.scheduled_backup.cancel()
        self.heartbeat.cancel()
        self.logger.info("HousekeepingCog: Background tasks stopped")

    @tasks.loop(hours=24)
    async def scheduled_backup(self):
        """Background task to back up the scores file"""
        try:
            entry = await self.ledger.create_backup()
            if entry is not None:
                self.logger.info(f"Scheduled backup created: {entry.name}")
        except Exception as e:
            self.logger.error(f"Error in scheduled backup task: {e}", exc_info=True)

    @scheduled_backup.before_loop
    async def before_scheduled_backup(self):
        """Wait for bot to be ready before starting backup task"""
        await self.bot.wait_until_ready()

    @tasks.loop(minutes=2)
    async def heartbeat(self):
        self.logger.info(f"[{datetime.now(timezone.utc).isoformat()}] Keeping bot awake with ping")

    @heartbeat.before_loop
    async def before_heartbeat(self):
        await self.bot.wait_until_ready()


async def setup(bot):
    await bot.add_cog(HousekeepingCog(bot))
