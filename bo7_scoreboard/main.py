import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands

from bo7_scoreboard.config import Config
from bo7_scoreboard.context import AppContext
from bo7_scoreboard.services.keepalive import KeepAliveServer
from bo7_scoreboard.utils.error_embeds import ErrorEmbeds
from bo7_scoreboard.utils.ledger_exceptions import LedgerException, StorageWriteError
from bo7_scoreboard.utils.logger import setup_logger

class ScoreboardBot(commands.Bot):
    def __init__(self, app: AppContext):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.members = True

        super().__init__(
            command_prefix=app.config.command_prefix,
            intents=intents,
            help_command=None
        )

        self.app = app
        self.keepalive: Optional[KeepAliveServer] = None
        self.logger = logging.getLogger(__name__)

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up BO7 Scoreboard Bot...")

        # Keep-alive listener for hosting platforms
        if self.app.config.port:
            self.keepalive = KeepAliveServer(self.app.config.port)
            try:
                await self.keepalive.start()
            except OSError as e:
                self.logger.error(f"Failed to start HTTP server on port {self.app.config.port}: {e}")
                self.keepalive = None

        # Load cogs
        await self.load_cogs()

        # Sync slash commands
        await self._sync_commands()

        self.logger.info("BO7 Scoreboard Bot setup complete!")

    async def load_cogs(self):
        """Load all cogs"""
        cogs_to_load = [
            'bo7_scoreboard.cogs.scoreboard',
            'bo7_scoreboard.cogs.admin',
            'bo7_scoreboard.cogs.housekeeping',
        ]

        for cog in cogs_to_load:
            try:
                await self.load_extension(cog)
                self.logger.info(f"Loaded cog: {cog}")
            except Exception as e:
                self.logger.error(f"Failed to load cog {cog}: {e}", exc_info=True)

    async def _sync_commands(self):
        """Sync slash commands with Discord"""
        if not self.tree.get_commands():
            self.logger.warning("No application commands found to sync. Check for cog loading errors.")
            return

        try:
            guild_ids = self.app.config.get_guild_ids()

            if guild_ids:
                # Guild-specific sync (instant updates)
                for guild_id in guild_ids:
                    try:
                        guild = discord.Object(id=guild_id)
                        self.tree.copy_global_to(guild=guild)
                        synced = await self.tree.sync(guild=guild)
                        self.logger.info(f"Successfully synced {len(synced)} command(s) to guild {guild_id}")
                    except discord.errors.Forbidden:
                        self.logger.error(f"Permission error syncing to guild {guild_id}. Ensure the bot has the 'application.commands' scope and is in the guild.", exc_info=True)
                    except discord.errors.HTTPException as e:
                        self.logger.error(f"HTTP error syncing to guild {guild_id}. Status: {e.status}, Response: {e.text}", exc_info=True)
            else:
                # Global sync (can take up to 1 hour)
                self.logger.info("Attempting to sync commands globally... (Note: This can take up to an hour to propagate)")
                synced = await self.tree.sync()
                self.logger.info(f"Successfully synced {len(synced)} command(s) globally")
        except Exception as e:
            self.logger.error(f"Failed to sync commands: {e}", exc_info=True)
            # Don't raise - bot should continue working with prefix commands

    async def on_ready(self):
        """Called when the bot is ready"""
        self.logger.info(f'{self.user} has connected to Discord!')
        self.logger.info(f'Bot is in {len(self.guilds)} guilds')
        self.logger.info(f'Users with the "{self.app.config.admin_role_name}" role are treated as admins')

        await self.change_presence(
            activity=discord.Game(name=f"BO7 Scoreboard | {self.app.config.command_prefix}help")
        )

    async def on_message(self, message: discord.Message):
        if message.author.bot:
            return
        await self.process_commands(message)

    async def on_command_error(self, ctx: commands.Context, error: Exception):
        """Global error handler for commands"""
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.CheckFailure):
            self.logger.info(f"Permission denied for command '{ctx.command.name if ctx.command else 'Unknown'}' by user {ctx.author}")
            await ctx.reply(embed=ErrorEmbeds.permission_denied())
            return

        if isinstance(error, commands.CommandOnCooldown):
            await ctx.reply(f"❌ Command is on cooldown. Try again in {error.retry_after:.2f} seconds.")
            return

        if isinstance(error, commands.MissingRequiredArgument):
            await ctx.reply(f"❌ Missing required argument: `{error.param.name}`")
            return

        if isinstance(error, commands.UserInputError):
            await ctx.reply(embed=ErrorEmbeds.invalid_input(str(error)))
            return

        original = getattr(error, 'original', error)
        if isinstance(original, StorageWriteError):
            self.logger.error(f"Storage failure in command {ctx.command}: {original}")
            await ctx.reply(embed=ErrorEmbeds.storage_error())
            return
        if isinstance(original, LedgerException):
            await ctx.reply(embed=ErrorEmbeds.from_exception(original))
            return

        self.logger.error(f"Unexpected error in command {ctx.command}: {error}")
        self.logger.error(''.join(traceback.format_exception(type(original), original, original.__traceback__)))

        embed = discord.Embed(
            title="❌ An error occurred",
            description="An unexpected error occurred while processing your command. Please try again.",
            color=discord.Color.red()
        )
        try:
            await ctx.reply(embed=embed)
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send error response: {e}")

    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down BO7 Scoreboard Bot...")

        if self.keepalive:
            await self.keepalive.stop()

        await super().close()

async def main():
    """Main entry point"""
    config = Config.from_env()
    setup_logger('bo7_scoreboard', debug=config.debug, log_dir=config.log_dir)
    config.validate()

    bot = ScoreboardBot(AppContext.build(config))

    try:
        await bot.start(config.discord_token)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logging.getLogger(__name__).error(f"Fatal error: {e}", exc_info=True)
    finally:
        await bot.close()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
