"""Environment settings."""

import os
from typing import Optional


class Settings:
    """Application settings from environment variables."""

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            str: Environment variable value, empty when unset
        """
        value = os.getenv(key, default)
        return value or ""

    @staticmethod
    def broker_credentials() -> dict:
        """
        Credentials taken from EMQ_USERNAME / EMQ_PASSWORD.

        Only variables that are set and non-empty are returned, so the
        result can be merged over file and flag values.
        """
        credentials = {
            "username": Settings.get("EMQ_USERNAME"),
            "password": Settings.get("EMQ_PASSWORD"),
        }
        return {k: v for k, v in credentials.items() if v}
