# -*- coding: utf-8 -*-
"""Settings for wifilocation.

Values come from the environment (prefix ``WIFILOCATION_``) or a ``.env`` file:
``ENV_FILE`` when set, else ``.env`` in the working directory.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEOLOCATE_URL = 'https://www.googleapis.com/geolocation/v1/geolocate'
DEFAULT_BROWSERLOCATION_URL = 'https://maps.googleapis.com/maps/api/browserlocation/json'
DEFAULT_HTTP_TIMEOUT = 10.0


def _env_file() -> Path:
    explicit = os.getenv('ENV_FILE')
    if explicit:
        return Path(explicit)
    return Path.cwd() / '.env'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='WIFILOCATION_',
        env_file_encoding='utf-8',
        env_ignore_empty=True,
        case_sensitive=False,
        extra='ignore',
    )

    GEOLOCATE_URL: str = DEFAULT_GEOLOCATE_URL
    BROWSERLOCATION_URL: str = DEFAULT_BROWSERLOCATION_URL
    HTTP_TIMEOUT: float = DEFAULT_HTTP_TIMEOUT
    API_KEY: Optional[str] = None
    API_KEY_FILE: Optional[str] = None
    LOG_LEVEL: str = 'WARNING'


def get_settings() -> Settings:
    # resolved per call so ENV_FILE changes are honoured
    return Settings(_env_file=_env_file())


def get_api_key_from_file(path: str) -> str:
    """Return the whole file content as the API key.
    No trimming: a trailing newline stays part of the key. OSError propagates.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


class SettingsStore:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings if settings is not None else get_settings()

    def get_api_key(self) -> str:
        """API key from WIFILOCATION_API_KEY, else from WIFILOCATION_API_KEY_FILE, else ''."""
        if self.settings.API_KEY:
            return self.settings.API_KEY
        if self.settings.API_KEY_FILE:
            return get_api_key_from_file(self.settings.API_KEY_FILE)
        return ''

    def get_geolocate_url(self) -> str:
        return self.settings.GEOLOCATE_URL

    def get_browserlocation_url(self) -> str:
        return self.settings.BROWSERLOCATION_URL

    def get_http_timeout(self) -> float:
        return self.settings.HTTP_TIMEOUT

    def get_log_level(self) -> str:
        return self.settings.LOG_LEVEL

    def export_all(self) -> dict:
        # never includes the api key
        return {
            'geolocate_url': self.get_geolocate_url(),
            'browserlocation_url': self.get_browserlocation_url(),
            'http_timeout': self.get_http_timeout(),
            'api_key_file': self.settings.API_KEY_FILE,
            'log_level': self.get_log_level(),
        }
