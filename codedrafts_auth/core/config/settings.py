"""Main application settings and configuration management.

This module composes the settings from the different modules (app, database,
auth, email) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, emails are logged instead of sent
- Test: Uses .env.test, emails are logged instead of sent
- Staging: Uses .env.staging, SMTP credentials required
- Production: Uses .env.production, SMTP credentials and a real signing key required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import DEVELOPMENT_JWT_SECRET, AuthSettings
from .database import DatabaseSettings
from .email import EmailSettings

logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)


class Settings(AppSettings, DatabaseSettings, AuthSettings, EmailSettings):
    """The main settings class that aggregates all application configurations.

    It inherits from all the specialized settings classes, providing a unified
    interface to all configuration parameters.

    Security Note:
        - Sensitive fields (signing keys, SMTP password, client secrets) are
          `SecretStr` and must never be logged.
        - Production refuses to start with the development signing key
          (OWASP A05:2021 - Security Misconfiguration).
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Args:
            env: Environment name
        """
        if env in ("development", "test"):
            self.EMAIL_TEST_MODE = True

        if env == "development":
            self.DEBUG = True

        logger.info(
            "Application running in %s environment (email test mode: %s, debug: %s)",
            env,
            self.EMAIL_TEST_MODE,
            self.DEBUG,
        )

    def validate_required_fields(self) -> None:
        """Validates the configuration that production cannot run without.

        Raises:
            ValueError: If a production deployment still uses development secrets
                or has an invalid SMTP configuration.
        """
        if self.APP_ENV not in ("production", "staging"):
            return

        problems = []
        if (
            not self.JWT_ALGORITHM.upper().startswith("RS")
            and self.JWT_SECRET_KEY.get_secret_value() in ("", DEVELOPMENT_JWT_SECRET)
        ):
            problems.append("JWT_SECRET_KEY must be set to a private value")
        if not self.GOOGLE_CLIENT_ID:
            logger.warning("GOOGLE_CLIENT_ID is not set; Google login will be rejected")

        try:
            self.validate_smtp_config()
        except ValueError as e:
            problems.append(str(e))

        if problems:
            error_msg = "Invalid configuration: " + "; ".join(problems)
            logger.error(error_msg)
            raise ValueError(error_msg)


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info("Loading environment configuration from %s", env_file)
        return Settings(_env_file=env_file)
    return Settings()


# Module-level configuration object shared by the whole package.
settings = create_settings()
settings.validate_required_fields()
