"""
Database Management System (src/core/database.py)

This file handles all database operations using Firebase. It's the only file that should
directly interact with Firebase, making it the single source of truth for data persistence.

Key Features:
- World settings stored as strings under settings/<namespace>/<key>
- Characters collection (actors, their items and active effects)
- Scenes collection (token placements per channel)
- Automated error handling and logging

When to Modify:
- Adding new types of data to save/load
- Changing how data is structured in Firebase
- Modifying error handling for database operations

Dependencies:
- Firebase Admin SDK
- Service account json for Firebase authentication (FIREBASE_CREDENTIALS)
- secrets.env for Firebase configuration
"""

import logging
import firebase_admin
from firebase_admin import credentials, db
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

class Database:
    """Handles all database operations using Firebase Realtime Database."""

    def __init__(self, database_url: Optional[str] = None, credentials_path: Optional[str] = None):
        self.database_url = database_url
        self.credentials_path = credentials_path
        self.initialized = False
        self._db = None
        self._refs = {}

    async def initialize(self) -> None:
        """Initialize Firebase connection"""
        if self.initialized:
            return

        try:
            if not self.database_url or not self.credentials_path:
                raise RuntimeError("FIREBASE_DATABASE_URL and FIREBASE_CREDENTIALS must be set")

            cred = credentials.Certificate(self.credentials_path)
            firebase_admin.initialize_app(cred, {
                'databaseURL': self.database_url
            })

            # Initialize database references
            self._db = db.reference('/')
            self._refs = {
                'settings': db.reference('settings'),
                'characters': db.reference('characters'),
                'scenes': db.reference('scenes'),
            }

            self.initialized = True
            logger.info("Database initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}", exc_info=True)
            raise

    # World settings
    async def load_settings(self) -> Dict[str, Dict[str, str]]:
        """Load every stored world setting as {namespace: {key: value}}"""
        if not self.initialized:
            await self.initialize()

        try:
            data = self._refs['settings'].get()
            return data if isinstance(data, dict) else {}
        except Exception as e:
            logger.error(f"Failed to load settings: {str(e)}", exc_info=True)
            raise

    async def set_setting(self, namespace: str, key: str, value: str) -> None:
        """Write a single world setting"""
        if not self.initialized:
            await self.initialize()

        try:
            self._refs['settings'].child(namespace).child(key).set(value)
            logger.info(f"Setting {namespace}.{key} saved successfully")
        except Exception as e:
            logger.error(f"Failed to save setting {namespace}.{key}: {str(e)}", exc_info=True)
            raise

    # Characters
    async def save_character(self, character) -> None:
        """Save character data to the database"""
        if not self.initialized:
            await self.initialize()

        try:
            self._refs['characters'].child(character.id).set(character.to_dict())
            logger.info(f"Character {character.name} saved successfully")
        except Exception as e:
            logger.error(f"Failed to save character: {str(e)}", exc_info=True)
            raise

    async def load_characters(self) -> Dict[str, Dict[str, Any]]:
        """Load all characters as {character_id: data}"""
        if not self.initialized:
            await self.initialize()

        try:
            data = self._refs['characters'].get()
            return data if isinstance(data, dict) else {}
        except Exception as e:
            logger.error(f"Failed to load characters: {str(e)}", exc_info=True)
            raise

    # Scenes
    async def save_scene(self, scene) -> None:
        """Save a scene (token placements) to the database"""
        if not self.initialized:
            await self.initialize()

        try:
            self._refs['scenes'].child(str(scene.id)).set(scene.to_dict())
            logger.info(f"Scene {scene.id} saved successfully")
        except Exception as e:
            logger.error(f"Failed to save scene: {str(e)}", exc_info=True)
            raise

    async def load_scenes(self) -> Dict[str, Dict[str, Any]]:
        """Load all scenes as {scene_id: data}"""
        if not self.initialized:
            await self.initialize()

        try:
            data = self._refs['scenes'].get()
            return data if isinstance(data, dict) else {}
        except Exception as e:
            logger.error(f"Failed to load scenes: {str(e)}", exc_info=True)
            raise
