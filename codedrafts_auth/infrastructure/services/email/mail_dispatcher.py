"""SMTP mail dispatcher for account emails.

Renders the Jinja2 HTML templates shipped with the package and delivers them
through fastapi-mail. In test mode (the default outside production) emails are
logged instead of sent.

Delivery never fails the calling flow: every error is logged here and
absorbed, so a mail provider outage cannot break registration or password
reset requests.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import structlog
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, TemplateError

from codedrafts_auth.core.config.settings import Settings, settings as default_settings
from codedrafts_auth.core.exceptions import EmailServiceError
from codedrafts_auth.domain.interfaces.services import IMailDispatcher
from codedrafts_auth.utils.i18n import get_translated_message
from codedrafts_auth.utils.security import mask_email

logger = structlog.get_logger(__name__)

VERIFICATION_TEMPLATE = "email_verification.html"
PASSWORD_RESET_TEMPLATE = "password_reset.html"


class MailDispatcher(IMailDispatcher):
    """fastapi-mail implementation of `IMailDispatcher`.

    Attributes:
        jinja_env: Jinja2 environment for template rendering.
        fastmail: FastMail instance for email delivery; None in test mode.
    """

    def __init__(self, config: Optional[Settings] = None, fastmail: Optional[FastMail] = None):
        self._settings = config or default_settings
        self._setup_configuration()
        self._setup_template_environment()
        self.fastmail = fastmail if fastmail is not None else self._setup_smtp_client()

        logger.info(
            "MailDispatcher initialized",
            test_mode=self.is_test_mode(),
            smtp_configured=bool(self._settings.EMAIL_SMTP_USERNAME),
        )

    def _setup_configuration(self) -> None:
        try:
            self._settings.validate_smtp_config()
        except ValueError as e:
            # Don't fail initialization; delivery errors are logged per email.
            logger.warning("Email configuration validation warning", error=str(e))

    def _setup_template_environment(self) -> None:
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(Path(self._settings.EMAIL_TEMPLATES_DIR))),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.jinja_env.filters["mask_email"] = mask_email

    def _setup_smtp_client(self) -> Optional[FastMail]:
        if self.is_test_mode():
            logger.info("Mail dispatcher in test mode - emails will be logged")
            return None

        password = self._settings.EMAIL_SMTP_PASSWORD
        config = ConnectionConfig(
            MAIL_USERNAME=self._settings.EMAIL_SMTP_USERNAME or "",
            MAIL_PASSWORD=password.get_secret_value() if password else "",
            MAIL_FROM=self._settings.EMAIL_FROM_EMAIL,
            MAIL_PORT=self._settings.EMAIL_SMTP_PORT,
            MAIL_SERVER=self._settings.EMAIL_SMTP_HOST,
            MAIL_FROM_NAME=self._settings.EMAIL_FROM_NAME,
            MAIL_STARTTLS=self._settings.EMAIL_SMTP_USE_TLS,
            MAIL_SSL_TLS=self._settings.EMAIL_SMTP_USE_SSL,
            USE_CREDENTIALS=bool(self._settings.EMAIL_SMTP_USERNAME and password),
            VALIDATE_CERTS=True,
        )
        return FastMail(config)

    def is_test_mode(self) -> bool:
        return bool(self._settings.EMAIL_TEST_MODE)

    def build_link(self, path: str, token: str) -> str:
        """Frontend URL for ``path`` carrying ``token`` as a query parameter."""
        return f"{self._settings.FRONTEND_URL}/{path}?{urlencode({'token': token})}"

    async def send_verification_email(self, email: str, username: str, user_id: int, token: str) -> None:
        context = {
            "user_name": username or email.split("@", 1)[0],
            "verification_url": self.build_link("verify-email", token),
            "expires_minutes": self._settings.VERIFY_EMAIL_TOKEN_EXPIRE_MINUTES,
            "app_name": self._settings.EMAIL_FROM_NAME,
        }
        await self._dispatch(
            email=email,
            user_id=user_id,
            subject=get_translated_message("email_verification_subject"),
            template_name=VERIFICATION_TEMPLATE,
            context=context,
        )

    async def send_password_reset_email(self, username: str, email: str, user_id: int, token: str) -> None:
        context = {
            "user_name": username or email.split("@", 1)[0],
            "reset_url": self.build_link("reset-password", token),
            "expires_minutes": self._settings.RESET_PASSWORD_TOKEN_EXPIRE_MINUTES,
            "app_name": self._settings.EMAIL_FROM_NAME,
        }
        await self._dispatch(
            email=email,
            user_id=user_id,
            subject=get_translated_message("password_reset_subject"),
            template_name=PASSWORD_RESET_TEMPLATE,
            context=context,
        )

    async def _dispatch(
        self,
        email: str,
        user_id: int,
        subject: str,
        template_name: str,
        context: Dict[str, Any],
    ) -> None:
        try:
            html_content = self._render_template(template_name, context)
            await self._send_email(email, subject, html_content)
        except EmailServiceError as e:
            logger.error(
                "Email dispatch failed",
                user_id=user_id,
                email=mask_email(email),
                template=template_name,
                error=str(e),
            )
            return

        logger.info(
            "Email dispatched",
            user_id=user_id,
            email=mask_email(email),
            template=template_name,
            test_mode=self.is_test_mode(),
        )

    def _render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render an email template.

        Raises:
            EmailServiceError: If the template is missing or fails to render.
        """
        try:
            return self.jinja_env.get_template(template_name).render(**context)
        except TemplateError as e:
            raise EmailServiceError(f"Template rendering failed: {e}") from e

    async def _send_email(self, to_email: str, subject: str, html_content: str) -> None:
        if self.fastmail is None:
            logger.info(
                "Email (test mode)",
                to_email=mask_email(to_email),
                subject=subject,
                preview=_html_to_text(html_content)[:200],
            )
            return

        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=html_content,
            subtype=MessageType.html,
        )
        try:
            await self.fastmail.send_message(message)
        except Exception as e:
            raise EmailServiceError(f"Email sending failed: {e}") from e


def _html_to_text(html_content: str) -> str:
    text = re.sub(r"<[^>]+>", " ", html_content)
    return re.sub(r"\s+", " ", text).strip()
