"""
Extempore chat card commands.

Adds three message context menu actions:
- Create Effect: derive a condition from the message and apply it to the targets
- Remove Effect: remove the message's condition from the targets
- Remove All: strip every extempore condition from the controlled tokens

Also re-asserts the extempore entries in the status list whenever the bot rebuilds it
(gateway resume, guild becoming available) and syncs the system tray once ready.

Message Format Standard:
All feedback messages follow the format: `[emoji] [backticked message]`
"""

import html
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List

import discord
from discord import app_commands
from discord.ext import commands

from core.effects.condition import builtin_status_effects
from core.effects.extraction import ChatCard, Speaker
from utils.error_handler import handle_error
from utils.formatting import MessageFormatter

logger = logging.getLogger(__name__)

def is_gm(member: Any, gm_role: str) -> bool:
    """Members who can manage the guild, or hold the GM role"""
    perms = getattr(member, "guild_permissions", None)
    if perms is not None and perms.manage_guild:
        return True
    return any(getattr(role, "name", None) == gm_role for role in getattr(member, "roles", None) or [])

def card_html(text: Any) -> str:
    """Discord text as card HTML: markdown markers dropped, the rest escaped"""
    plain = discord.utils.remove_markdown(str(text if text is not None else ""))
    return html.escape(plain, quote=False)

def build_chat_card(message: discord.Message, game_state, system_id: str) -> ChatCard:
    """
    Read a Discord message as a chat card.
    The first embed's title is the flavor; message text, embed description and
    embed fields ("Field: value" lines) make up the content.
    """
    embed = message.embeds[0] if message.embeds else None

    flavor = card_html(embed.title) if embed and embed.title else ""
    parts = []
    if message.content:
        parts.append(f"<div>{card_html(message.content)}</div>")
    if embed:
        if embed.description:
            parts.append(f"<div>{card_html(embed.description)}</div>")
        for embed_field in embed.fields:
            label = card_html(embed_field.name).rstrip(":").strip()
            parts.append(f"<p><b>{label}:</b> {card_html(embed_field.value)}</p>")

    alias = ""
    if embed and embed.author and embed.author.name:
        alias = embed.author.name
    elif message.author:
        alias = message.author.display_name

    scene_id = message.channel.id if message.channel else None
    actor = game_state.get_character(alias) if alias else None
    scene = game_state.get_scene(scene_id)
    token = scene.find_token(alias) if scene and alias else None

    return ChatCard(
        id=message.id,
        flavor=flavor,
        content="\n".join(parts),
        speaker=Speaker(
            alias=alias,
            actor=actor.id if actor else (token.actor_id if token else None),
            token=token.id if token else None
        ),
        flags=game_state.get_message_flags(scene_id, message.id),
        scene_id=scene_id
    )

@dataclass
class MenuOption:
    """A chat message context menu entry"""
    label_key: str
    callback: Callable[[discord.Interaction, discord.Message], Awaitable[None]]

class ExtemporeCommands(commands.Cog):
    def __init__(self, bot):
        self.bot = bot
        self.menu_commands: List[app_commands.ContextMenu] = []
        self.register_menu_options()

    def menu_options(self) -> List[MenuOption]:
        return [
            MenuOption("D616EE.CreateEffect", self.create_effect),
            MenuOption("D616EE.RemoveEffect", self.remove_effect),
            MenuOption("D616EE.RemoveAll", self.remove_all),
        ]

    def menu_name(self, option: MenuOption) -> str:
        t = self.bot.i18n.t
        return f"{t('D616EE.ContextMenuTitle')}: {t(option.label_key)}"[:32]

    def register_menu_options(self) -> None:
        """Add every option to the command tree as a message context menu"""
        for option in self.menu_options():
            menu = app_commands.ContextMenu(name=self.menu_name(option), callback=option.callback)
            self.bot.tree.add_command(menu)
            self.menu_commands.append(menu)
        logger.info(f"Registered {len(self.menu_commands)} chat context menu option(s)")

    async def cog_unload(self) -> None:
        for menu in self.menu_commands:
            self.bot.tree.remove_command(menu.name, type=menu.type)

    async def _reply(self, interaction: discord.Interaction, result) -> None:
        await interaction.followup.send(
            MessageFormatter.notification(result.level, result.message),
            ephemeral=True
        )

    def _is_gm(self, interaction: discord.Interaction) -> bool:
        return is_gm(interaction.user, self.bot.gm_role)

    async def create_effect(self, interaction: discord.Interaction, message: discord.Message):
        """Create (or reuse) a condition from the message and apply it"""
        try:
            await interaction.response.defer(ephemeral=True)
            card = build_chat_card(message, self.bot.game_state, self.bot.system_id)
            result = await self.bot.extempore.apply_from_message(
                card, interaction.user.id, self._is_gm(interaction)
            )
            await self._reply(interaction, result)
        except Exception as e:
            await handle_error(interaction, e)

    async def remove_effect(self, interaction: discord.Interaction, message: discord.Message):
        """Remove the message's condition from the targets"""
        try:
            await interaction.response.defer(ephemeral=True)
            card = build_chat_card(message, self.bot.game_state, self.bot.system_id)
            result = await self.bot.extempore.remove_from_message(
                card, interaction.user.id, self._is_gm(interaction)
            )
            await self._reply(interaction, result)
        except Exception as e:
            await handle_error(interaction, e)

    async def remove_all(self, interaction: discord.Interaction, message: discord.Message):
        """Remove every extempore condition from the controlled tokens"""
        try:
            await interaction.response.defer(ephemeral=True)
            result = await self.bot.extempore.remove_all_from_selection(
                interaction.user.id, interaction.channel_id, self._is_gm(interaction)
            )
            await self._reply(interaction, result)
        except Exception as e:
            await handle_error(interaction, e)

    ## Lifecycle ##

    @commands.Cog.listener()
    async def on_ready(self):
        # The bot process owns the world, so it may write the system tray
        await self.bot.extempore.sync(is_gm=True)

    @commands.Cog.listener()
    async def on_resumed(self):
        self.bot.extempore.on_status_list_rebuilt(builtin_status_effects())

    @commands.Cog.listener()
    async def on_guild_available(self, guild: discord.Guild):
        self.bot.extempore.on_status_list_rebuilt(builtin_status_effects())

async def setup(bot):
    await bot.add_cog(ExtemporeCommands(bot))
