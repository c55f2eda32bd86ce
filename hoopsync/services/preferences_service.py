"""
Preferences service for the HoopSync live stat-keeper client.

This module saves and loads the keeper's setup (token, team names, rosters,
last game id) to/from a JSON file so a device comes back as it was left.
"""
import json
import os
from dataclasses import asdict, dataclass, field, fields
from typing import List, Optional

from ..models import default_game_id
from ..utils import get_logger

log = get_logger(__name__)


@dataclass
class KeeperPreferences:
    """
    Setup a stat-keeper fills in before starting or joining a game.

    Rosters are lists of ``{"jersey": ..., "name": ...}`` entries.
    """
    access_token: str = ""
    home_team: str = "James Monroe"
    away_team: str = "Opponent"
    home_roster: List[dict] = field(default_factory=list)
    away_roster: List[dict] = field(default_factory=list)
    game_id: str = field(default_factory=default_game_id)
    last_archive_tab: str = ""

    def to_json(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_json(data: dict) -> "KeeperPreferences":
        known = {f.name for f in fields(KeeperPreferences)}
        return KeeperPreferences(**{k: v for k, v in data.items() if k in known and v is not None})


class PreferencesService:
    """Service for persisting keeper preferences to a JSON file."""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def save(self, prefs: KeeperPreferences) -> None:
        """
        Save preferences, writing through a temp file so a crash never
        leaves a half-written file behind.

        Raises:
            OSError: If the file cannot be written
        """
        directory = os.path.dirname(self.file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        tmp_path = self.file_path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(prefs.to_json(), f, indent=2)
        os.replace(tmp_path, self.file_path)

    def load(self) -> KeeperPreferences:
        """
        Load preferences; a missing or unreadable file yields defaults.
        """
        if not os.path.exists(self.file_path):
            return KeeperPreferences()

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Ignoring unreadable preferences file %s: %s", self.file_path, e)
            return KeeperPreferences()

        if not isinstance(data, dict):
            return KeeperPreferences()
        return KeeperPreferences.from_json(data)

    def update(self, **changes) -> KeeperPreferences:
        """Load, apply the given field changes, save and return the result."""
        prefs = self.load()
        for key, value in changes.items():
            if value is not None and hasattr(prefs, key):
                setattr(prefs, key, value)
        self.save(prefs)
        return prefs
