"""Signing key material sourced from settings."""

from typing import Optional

from codedrafts_auth.core.config.settings import Settings, settings as default_settings
from codedrafts_auth.domain.interfaces.services import ISigningKeyProvider


class SettingsSigningKeyProvider(ISigningKeyProvider):
    """Reads the JWT algorithm and keys from `Settings`.

    HMAC algorithms use ``JWT_SECRET_KEY`` both ways; RSA algorithms sign
    with ``JWT_PRIVATE_KEY`` and verify with ``JWT_PUBLIC_KEY``.
    """

    def __init__(self, config: Optional[Settings] = None):
        self._settings = config or default_settings

    @property
    def algorithm(self) -> str:
        return self._settings.JWT_ALGORITHM

    def _is_asymmetric(self) -> bool:
        return self.algorithm.upper().startswith("RS")

    def get_signing_key(self) -> str:
        if self._is_asymmetric():
            return self._settings.JWT_PRIVATE_KEY.get_secret_value()
        return self._settings.JWT_SECRET_KEY.get_secret_value()

    def get_verification_key(self) -> str:
        if self._is_asymmetric():
            return self._settings.JWT_PUBLIC_KEY
        return self._settings.JWT_SECRET_KEY.get_secret_value()
