"""Outbound email for student verification codes.

Delivery is pluggable: routes depend on ``get_email_sender`` and only see the
``EmailSender`` contract. The default sender writes the code to the log.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send_verification_code(self, email: str, code: str) -> bool:
        ...


class LogEmailSender:
    """Stand-in transport that logs the message instead of sending it."""

    def send_verification_code(self, email: str, code: str) -> bool:
        logger.info('Verification code for %s: %s', email, code)
        return True


_default_sender = LogEmailSender()


def get_email_sender() -> EmailSender:
    return _default_sender
