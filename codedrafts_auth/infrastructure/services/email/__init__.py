from codedrafts_auth.infrastructure.services.email.mail_dispatcher import MailDispatcher

__all__ = ["MailDispatcher"]
