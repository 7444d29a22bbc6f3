"""
Extempore Effects Discord Bot

Turns chat cards into token conditions. Right-click a message and pick
"Extempore: Create Effect" to derive a condition from the card (power, item, trait
or tag line) and apply it to the tokens you control; "Remove Effect" and
"Remove All" take conditions back off.

Code Organization:
- core/: Game state, persistence and the extempore effect logic
- commands/: Context menus and slash commands
- utils/: Constants, localization (utils/lang/ translation files), formatting and error handling
"""

import os
import logging
from typing import List

import discord
from discord.ext import commands
from dotenv import load_dotenv

# Core imports
from core.database import Database
from core.settings import WorldSettings
from core.state import GameState
from core.effects.condition import builtin_status_effects
from core.effects.manager import ExtemporeEffects
from core.effects.registry import ConditionRegistry
from core.effects.status_config import StatusEffectConfig
from core.effects.system_conditions import SystemConditionStore

# Utils
from utils.constants import (
    DEFAULT_GM_ROLE, DEFAULT_LANGUAGE, DEFAULT_SYSTEM_ID, SYS_CUSTOM_COND_SETTING
)
from utils.error_handler import setup as error_handler_setup
from utils.i18n import Localizer


# Load environment variables
load_dotenv('secrets.env')


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('bot.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


def parse_guild_ids(raw: str) -> List[int]:
    return [int(part) for part in (raw or "").split(",") if part.strip().isdigit()]


TOKEN = os.getenv("DISCORD_TOKEN")
GUILD_IDS = parse_guild_ids(os.getenv("GUILD_IDS", ""))
SYSTEM_ID = os.getenv("EXTEMPORE_SYSTEM_ID", DEFAULT_SYSTEM_ID)
SYSTEM_TRAY_ENABLED = os.getenv("EXTEMPORE_SYSTEM_TRAY", "1") != "0"


class ExtemporeBot(commands.Bot):
    """Main bot class that wires the game state to the extempore effect tools"""
    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.messages = True

        super().__init__(
            command_prefix='/',
            intents=intents,
            allowed_mentions=discord.AllowedMentions(
                roles=False,
                users=False,
                everyone=False
            )
        )

        self.system_id = SYSTEM_ID
        self.gm_role = os.getenv("EXTEMPORE_GM_ROLE", DEFAULT_GM_ROLE)
        self.i18n = Localizer(os.getenv("EXTEMPORE_LANG", DEFAULT_LANGUAGE))

        # Initialize core systems
        self.db = Database(
            database_url=os.getenv("FIREBASE_DATABASE_URL"),
            credentials_path=os.getenv("FIREBASE_CREDENTIALS")
        )
        self.settings = WorldSettings(self.db)
        self.status_config = StatusEffectConfig(
            default_icon=f"systems/{self.system_id}/icons/m.svg",
            base=builtin_status_effects()
        )
        self.game_state = GameState(status_config=self.status_config)
        self.registry = ConditionRegistry(self.settings)
        self.system_store = SystemConditionStore(
            self.settings,
            self.system_id,
            remove_hint=self.i18n.t("D616EE.RemoveHint")
        )
        self.extempore = ExtemporeEffects(
            self.game_state,
            self.registry,
            self.status_config,
            self.system_store,
            self.i18n,
            system_id=self.system_id
        )

    def register_settings(self) -> None:
        self.registry.register_setting()
        if SYSTEM_TRAY_ENABLED:
            self.settings.register(
                self.system_id,
                SYS_CUSTOM_COND_SETTING,
                name="Custom Conditions (JSON)",
                scope="world",
                default="[]"
            )

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.register_settings()

        # Load data from database
        await self.db.initialize()
        await self.settings.load()
        await self.game_state.load(self.db)

        await self.load_extension("commands.extempore")  # Chat card context menus
        await self.load_extension("commands.tokens")  # Token, selection and character commands

        # Sync guild-specific commands
        for guild_id in GUILD_IDS:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info(f"{len(synced)} commands synced to guild ID {guild_id}")

    async def on_ready(self):
        """Called when the bot is ready"""
        logger.info(f'Logged in as {self.user} (ID: {self.user.id})')


def main():
    if not TOKEN:
        raise RuntimeError("DISCORD_TOKEN missing. Check secrets.env contents and spelling.")

    bot = ExtemporeBot()

    # Setup error handler
    error_handler_setup(bot)

    bot.run(TOKEN, log_handler=None)


if __name__ == "__main__":
    main()
