"""Authentication settings: token signing, token lifetimes, password hashing
and the social identity providers.
"""

import logging
from pathlib import Path

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEVELOPMENT_JWT_SECRET = "codedrafts-development-secret-key-change-me"


class AuthSettings(BaseSettings):
    """Defines settings for authentication, including social providers and JWT signing.

    HMAC algorithms (``HS256`` and friends) sign with ``JWT_SECRET_KEY``. RSA
    algorithms sign with ``JWT_PRIVATE_KEY`` and verify with ``JWT_PUBLIC_KEY``,
    which may also be supplied through ``private.pem``/``public.pem`` files.

    Security Note:
        - Signing keys must be securely stored and rotated regularly to prevent token
          forgery (OWASP A02:2021 - Cryptographic Failures).
        - Social client secrets should never be exposed in logs or version control.
    """

    # Token signing
    JWT_ALGORITHM: str = "HS256"
    JWT_SECRET_KEY: SecretStr = SecretStr(DEVELOPMENT_JWT_SECRET)
    JWT_PRIVATE_KEY: SecretStr = SecretStr("")
    JWT_PUBLIC_KEY: str = ""

    # Token lifetimes
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24, ge=1)
    VERIFY_EMAIL_TOKEN_EXPIRE_MINUTES: int = Field(default=60, ge=1)
    RESET_PASSWORD_TOKEN_EXPIRE_MINUTES: int = Field(default=60, ge=1)

    # Password hashing (bcrypt accepts 4..31 rounds)
    BCRYPT_WORK_FACTOR: int = Field(default=12, ge=4, le=31)

    # Social providers
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_TOKENINFO_URL: str = "https://oauth2.googleapis.com/tokeninfo"
    FACEBOOK_GRAPH_API_URL: str = "https://graph.facebook.com"
    FACEBOOK_GRAPH_API_VERSION: str = "v17.0"
    GITHUB_API_URL: str = "https://api.github.com"
    OAUTH_HTTP_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    @model_validator(mode="after")
    def _load_and_validate_jwt_keys(self) -> "AuthSettings":
        """Loads RSA keys from PEM files when an RSA algorithm is configured.

        Raises:
            ValueError: If an RSA algorithm is selected but no key pair is available.

        Returns:
            Self instance with loaded keys.
        """
        if not self.JWT_ALGORITHM.upper().startswith("RS"):
            return self

        self._load_keys_from_pem_files()
        if not self.JWT_PRIVATE_KEY.get_secret_value() or not self.JWT_PUBLIC_KEY:
            error_msg = (
                f"JWT keys not found for {self.JWT_ALGORITHM}. Provide JWT_PRIVATE_KEY and "
                "JWT_PUBLIC_KEY either via environment variables or private.pem/public.pem files."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)
        return self

    def _load_keys_from_pem_files(self) -> None:
        """Loads JWT keys from private.pem and public.pem if they exist.
        These files override any existing environment variables.
        """
        private_key_path = Path("private.pem").resolve()
        public_key_path = Path("public.pem").resolve()

        if private_key_path.is_file():
            private_key = private_key_path.read_text().strip()
            if private_key:
                self.JWT_PRIVATE_KEY = SecretStr(private_key)
                logger.info("Loaded JWT private key from private.pem")

        if public_key_path.is_file():
            public_key = public_key_path.read_text().strip()
            if public_key:
                self.JWT_PUBLIC_KEY = public_key
                logger.info("Loaded JWT public key from public.pem")
