"""Common tasks."""

import typing as t

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = structlog.get_logger(__name__)


@shared_task
def send_email(
    *,
    to: str | list[str],
    subject: str,
    body: str,
    html_body: str | None = None,
    attachments: list[dict[str, t.Any]] | None = None,
) -> None:
    """Send an email.

    Args:
        to: The recipient address or addresses.
        subject: The email subject.
        body: The plain text body.
        html_body: An optional HTML alternative.
        attachments: Optional list of ``{"filename", "content", "mimetype"}`` dicts.
            ``content`` is a latin-1 encoded string so the payload stays JSON serializable.
    """
    recipients = [to] if isinstance(to, str) else to
    email_msg = EmailMultiAlternatives(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
    )
    if html_body:
        email_msg.attach_alternative(html_body, "text/html")
    for attachment in attachments or []:
        email_msg.attach(
            attachment["filename"],
            attachment["content"].encode("latin-1"),
            attachment["mimetype"],
        )
    email_msg.send(fail_silently=False)
    logger.info("email_sent", subject=subject, recipient_count=len(recipients))
