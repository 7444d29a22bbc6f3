"""
Discord commands for characters, tokens and selection.

Each channel is a scene. Characters are placed on a scene as tokens; each user controls
a set of tokens per scene, which is what the extempore context menu actions target.

Message Format Standard:
All feedback messages should follow the format: `[emoji] [backticked message]`
"""

import logging
from typing import List

import discord
from discord import app_commands
from discord.ext import commands

from core.character import Character
from utils.constants import EMOJI_MAP
from utils.error_handler import handle_error
from utils.formatting import MessageFormatter, create_item_card, create_status_embed, format_token_list

logger = logging.getLogger(__name__)

def split_names(raw: str) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]

class TokenCommands(commands.GroupCog, name="token"):
    def __init__(self, bot):
        self.bot = bot
        super().__init__()

    def t(self, key, data=None):
        return self.bot.i18n.t(key, data)

    @app_commands.command(name="place", description="Place a character's token on this channel's scene")
    @app_commands.describe(character="Character to place")
    async def place(self, interaction: discord.Interaction, character: str):
        try:
            char = self.bot.game_state.get_character(character)
            if not char:
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.CharacterNotFound", {"name": character}), EMOJI_MAP["failure"]),
                    ephemeral=True
                )
                return

            token = self.bot.game_state.place_token(interaction.channel_id, char)
            await self.bot.game_state.save_scene(self.bot.game_state.get_scene(interaction.channel_id))
            await interaction.response.send_message(
                MessageFormatter.effect(self.t("D616EE.TokenPlaced", {"name": token.name}), EMOJI_MAP["token"])
            )
        except Exception as e:
            await handle_error(interaction, e)

    @app_commands.command(name="remove", description="Remove a token from this channel's scene")
    @app_commands.describe(token="Token to remove")
    async def remove(self, interaction: discord.Interaction, token: str):
        try:
            scene = self.bot.game_state.get_scene(interaction.channel_id)
            found = scene.find_token(token) if scene else None
            if not found:
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.TokenNotFound", {"name": token}), EMOJI_MAP["failure"]),
                    ephemeral=True
                )
                return

            self.bot.game_state.remove_token(scene.id, found.id)
            await self.bot.game_state.save_scene(scene)
            await interaction.response.send_message(
                MessageFormatter.effect(self.t("D616EE.TokenRemoved", {"name": found.name}), EMOJI_MAP["token"])
            )
        except Exception as e:
            await handle_error(interaction, e)

    @app_commands.command(name="select", description="Control one or more tokens (comma separated)")
    @app_commands.describe(tokens="Token names, e.g. 'Ronan, Testman'")
    async def select(self, interaction: discord.Interaction, tokens: str):
        try:
            scene = self.bot.game_state.get_scene(interaction.channel_id)
            if not scene:
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.NoScene"), EMOJI_MAP["warning"]),
                    ephemeral=True
                )
                return

            ids = []
            for name in split_names(tokens):
                found = scene.find_token(name)
                if not found:
                    await interaction.response.send_message(
                        MessageFormatter.effect(self.t("D616EE.TokenNotFound", {"name": name}), EMOJI_MAP["failure"]),
                        ephemeral=True
                    )
                    return
                ids.append(found.id)

            controlled = self.bot.game_state.control_tokens(interaction.user.id, scene.id, ids)
            names = ", ".join(t.name for t in controlled)
            await interaction.response.send_message(
                MessageFormatter.effect(self.t("D616EE.Selected", {"names": names}), EMOJI_MAP["select"]),
                ephemeral=True
            )
        except Exception as e:
            await handle_error(interaction, e)

    @app_commands.command(name="release", description="Stop controlling tokens on this scene")
    async def release(self, interaction: discord.Interaction):
        self.bot.game_state.release_tokens(interaction.user.id, interaction.channel_id)
        await interaction.response.send_message(
            MessageFormatter.effect(self.t("D616EE.Released"), EMOJI_MAP["select"]),
            ephemeral=True
        )

    @app_commands.command(name="list", description="List tokens on this channel's scene")
    async def list_tokens(self, interaction: discord.Interaction):
        scene = self.bot.game_state.get_scene(interaction.channel_id)
        if not scene or not scene.placeables:
            await interaction.response.send_message(
                MessageFormatter.effect(self.t("D616EE.NoTokens"), EMOJI_MAP["warning"]),
                ephemeral=True
            )
            return

        controlled = {t.id for t in self.bot.game_state.controlled_tokens(interaction.user.id, scene.id)}
        embed = discord.Embed(title=self.t("D616EE.TokensTitle"), color=discord.Color.blue())
        embed.description = format_token_list(scene.placeables)
        if controlled:
            embed.add_field(
                name=self.t("D616EE.Controlled"),
                value=", ".join(t.name for t in scene.placeables if t.id in controlled),
                inline=False
            )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="status", description="Show the conditions on a token")
    @app_commands.describe(token="Token to inspect")
    async def status(self, interaction: discord.Interaction, token: str):
        try:
            scene = self.bot.game_state.get_scene(interaction.channel_id)
            found = scene.find_token(token) if scene else None
            if not found or not found.actor:
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.TokenNotFound", {"name": token}), EMOJI_MAP["failure"]),
                    ephemeral=True
                )
                return

            if not found.actor.statuses:
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.NoEffects", {"name": found.name}), EMOJI_MAP["token"]),
                    ephemeral=True
                )
                return

            # Tray entries win over our own stored descriptions
            tray = {c.id: c.to_dict() for c in self.bot.registry.all()}
            tray.update({
                entry.get("id"): entry
                for entry in self.bot.system_store.all()
                if isinstance(entry, dict)
            })
            await interaction.response.send_message(embed=create_status_embed(found.actor, tray), ephemeral=True)
        except Exception as e:
            await handle_error(interaction, e)

class CharacterCommands(commands.GroupCog, name="character"):
    def __init__(self, bot):
        self.bot = bot
        super().__init__()

    def t(self, key, data=None):
        return self.bot.i18n.t(key, data)

    @app_commands.command(name="create", description="Create a new character")
    @app_commands.describe(name="The name of the character")
    async def create(self, interaction: discord.Interaction, name: str):
        try:
            if self.bot.game_state.get_character(name):
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.CharacterExists", {"name": name}), EMOJI_MAP["failure"]),
                    ephemeral=True
                )
                return

            char = Character(name=name, owner_id=interaction.user.id)
            self.bot.game_state.add_character(char)
            await self.bot.game_state.save_character(char)
            await interaction.response.send_message(
                MessageFormatter.effect(self.t("D616EE.CharacterCreated", {"name": name}), EMOJI_MAP["success"])
            )
        except Exception as e:
            await handle_error(interaction, e)

    @app_commands.command(name="item", description="Give a character an item, power or trait")
    @app_commands.describe(character="Character to receive it", name="Item name", item_type="Kind of item")
    @app_commands.choices(
        item_type=[
            app_commands.Choice(name="Power", value="power"),
            app_commands.Choice(name="Item", value="item"),
            app_commands.Choice(name="Trait", value="trait"),
        ]
    )
    async def item(self, interaction: discord.Interaction, character: str, name: str,
                   item_type: app_commands.Choice[str]):
        try:
            char = self.bot.game_state.get_character(character)
            if not char:
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.CharacterNotFound", {"name": character}), EMOJI_MAP["failure"]),
                    ephemeral=True
                )
                return

            char.add_item(name, item_type.value)
            await self.bot.game_state.save_character(char)
            await interaction.response.send_message(
                MessageFormatter.effect(
                    self.t("D616EE.ItemGained", {"name": char.name, "type": self.t(f"D616EE.ItemType.{item_type.value}"), "item": name}),
                    EMOJI_MAP["success"]
                )
            )
        except Exception as e:
            await handle_error(interaction, e)

    @app_commands.command(name="use", description="Post a chat card for an item or power")
    @app_commands.describe(character="Character using it", item="Item or power name", description="Card text")
    async def use(self, interaction: discord.Interaction, character: str, item: str, description: str = None):
        try:
            char = self.bot.game_state.get_character(character)
            found = None
            if char:
                found = next((i for i in char.items.values() if i.name.lower() == item.strip().lower()), None)
            if not found:
                await interaction.response.send_message(
                    MessageFormatter.effect(self.t("D616EE.ItemNotFound", {"name": character, "item": item}), EMOJI_MAP["failure"]),
                    ephemeral=True
                )
                return

            embed = create_item_card(char.name, found.name, found.type, description)
            await interaction.response.send_message(embed=embed)
            message = await interaction.original_response()
            # Lets "Create Effect" resolve the exact item instead of parsing the card
            scene = self.bot.game_state.record_message_flags(
                interaction.channel_id, message.id, {self.bot.system_id: {"itemId": found.id}}
            )
            await self.bot.game_state.save_scene(scene)
        except Exception as e:
            await handle_error(interaction, e)

async def setup(bot):
    await bot.add_cog(TokenCommands(bot))
    await bot.add_cog(CharacterCommands(bot))
