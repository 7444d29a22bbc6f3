"""Error handling utilities for the bot."""

import discord
from discord import app_commands
import logging
import re

logger = logging.getLogger(__name__)

class ErrorTranslator:
    # error type -> (pattern, friendly message); captured groups fill the {} slots
    ERROR_TRANSLATIONS = {
        "NotFound": (
            "404 Not Found",
            "Discord couldn't find what we're looking for. The message may be too old or has been deleted."
        ),
        "Forbidden": (
            "403 Forbidden",
            "The bot doesn't have permission to do this action. Check the bot's role permissions in your server settings."
        ),
        "HTTPException": (
            "(.+)",
            "There was an issue communicating with Discord. The message may be too long, or Discord is having issues."
        ),
        "InteractionResponded": (
            "(.+)",
            "This interaction was already answered."
        ),
        "CheckFailure": (
            "(.+)",
            "You don't have permission to use this command, or a check failed."
        ),
        "NoPrivateMessage": (
            "(.+)",
            "This command cannot be used in private messages, only in servers."
        ),
        "CommandInvokeError": (
            "(.+)",
            "The command started but ran into a problem. Check the error details below for more info."
        ),
        "FirebaseError": (
            "(.+)",
            "The database rejected the request. The change was not saved."
        ),
        "LookupError": (
            "(.+)",
            "That status isn't configured yet. Try again after the bot finishes syncing."
        ),
        "KeyError": (
            "'?([^']+)'? is not a registered setting",
            "The setting '{}' isn't registered. The game system may not be installed."
        ),
        "ValueError": (
            "(.+)",
            "The value we're trying to use isn't valid: {}"
        ),
    }

    @staticmethod
    def translate_error(error):
        """Converts Python errors into human-readable messages."""
        error_type = type(error).__name__
        error_msg = str(error)

        # app command wrappers hide the real error
        original = getattr(error, "original", None)
        if original is not None and error_type in ("CommandInvokeError", "AppCommandError"):
            return ErrorTranslator.translate_error(original)

        pattern, translation = ErrorTranslator.ERROR_TRANSLATIONS.get(
            error_type, ("(.+)", "An unexpected error occurred: {}")
        )

        match = re.search(pattern, error_msg)
        if match:
            return translation.format(*match.groups())

        # Fallback to a generic message with the original error
        return f"Something went wrong: {error_msg}"

    @staticmethod
    def format_for_console(error, context=""):
        """Formats the error message for console output with optional context."""
        friendly_message = ErrorTranslator.translate_error(error)

        console_message = [
            "\n🔍 Error Breakdown:",
            "=" * 50,
            f"📌 What Happened: {friendly_message}",
            f"🔧 Technical Details: {type(error).__name__}: {str(error)}"
        ]

        if context:
            console_message.append(f"📋 Context: {context}")

        console_message.append("=" * 50)

        return "\n".join(console_message)

def build_error_embed(error, command_name=None) -> discord.Embed:
    error_embed = discord.Embed(
        title="🔧 Oops! Something went wrong",
        description=ErrorTranslator.translate_error(error),
        color=discord.Color.red()
    )
    if command_name:
        error_embed.add_field(name="Command", value=f"`{command_name}`", inline=False)
    return error_embed

async def handle_error(interaction: discord.Interaction, error: Exception) -> None:
    """Handle errors during command execution - specifically for interaction-based commands"""
    command_name = interaction.command.name if interaction.command else None
    logger.error(ErrorTranslator.format_for_console(error, f"Command: {command_name or 'Unknown'}"))

    error_embed = build_error_embed(error, command_name)
    if interaction.response.is_done():
        await interaction.followup.send(embed=error_embed, ephemeral=True)
    else:
        await interaction.response.send_message(embed=error_embed, ephemeral=True)

def setup(bot):
    @bot.tree.error
    async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError):
        await handle_error(interaction, error)
