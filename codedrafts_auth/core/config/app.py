"""
Application-specific settings.
"""
from typing import List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and logging.

    Security Note:
        - FRONTEND_URL is embedded in verification and reset links sent by email;
          in production it must point at the trusted web client only.
    """
    PROJECT_NAME: str = "codedrafts"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    FRONTEND_URL: str = Field(default="http://localhost:3000")
    DEFAULT_LANGUAGE: str = "vi"
    SUPPORTED_LANGUAGES: Union[str, List[str]] = Field(default=["vi", "en"])

    @field_validator("SUPPORTED_LANGUAGES", mode="before")
    @classmethod
    def assemble_languages(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string of language codes into a list.

        Args:
            v: Input value as a string or list of language codes.

        Returns:
            List of stripped language codes.
        """
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    @field_validator("FRONTEND_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")
