from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from crosssums.core.profile import PlayerProfile

logger = logging.getLogger(__name__)

DATA_VERSION = 1


class ProfilePersistence(Protocol):
    """Storage the controller saves the player profile through."""

    def load_profile(self) -> PlayerProfile: ...

    def save_profile(self, profile: PlayerProfile) -> None: ...


def default_profile_path() -> Path:
    home = os.environ.get("CROSSSUMS_HOME")
    base = Path(home) if home else Path.home() / ".crosssums"
    return base / "profile.json"


class ProfileStore:
    """Stores the player profile as JSON. Persists across app restarts.
    File: ~/.crosssums/profile.json unless CROSSSUMS_HOME or a path is given."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = Path(file_path) if file_path else default_profile_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def profile_exists(self) -> bool:
        return self._file_path.exists()

    def load_profile(self) -> PlayerProfile:
        """Return the stored profile, or a default one if nothing usable is stored."""
        if not self._file_path.exists():
            return PlayerProfile()
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load profile from %s: %s", self._file_path, e)
            return PlayerProfile()
        if not isinstance(payload, dict):
            logger.warning("Profile file %s does not hold an object, using defaults", self._file_path)
            return PlayerProfile()
        version = payload.get("version", DATA_VERSION)
        if version != DATA_VERSION:
            logger.info("Migrating profile data from version %s to %s", version, DATA_VERSION)
        profile = payload.get("profile", {})
        if not isinstance(profile, dict):
            return PlayerProfile()
        return PlayerProfile.from_dict(profile)

    def save_profile(self, profile: PlayerProfile) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": DATA_VERSION, "profile": profile.to_dict()}
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save profile to %s: %s", self._file_path, e)

    def delete_profile(self) -> None:
        """Remove the stored profile (reset progress)."""
        try:
            self._file_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete profile %s: %s", self._file_path, e)
