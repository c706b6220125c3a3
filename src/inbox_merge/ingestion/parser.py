"""Utilities for parsing raw RFC822 messages into email records."""

from __future__ import annotations

from collections.abc import Iterable
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import getaddresses

from ..core.datetime_utils import parse_header_date
from ..core.models import AttachmentInfo, EmailRecord


class EmailParser:
    """Convert raw email payloads into immutable records."""

    def __init__(self) -> None:
        """Prepare internal parser instance."""
        self._parser = BytesParser(policy=policy.default)

    def parse(self, payload: bytes) -> EmailRecord:
        """Parse raw RFC822 bytes into an :class:`EmailRecord`."""
        message = self._parser.parsebytes(payload)
        return record_from_message(message)


def record_from_message(message: EmailMessage) -> EmailRecord:
    """Build an :class:`EmailRecord` from an already parsed message."""
    date = _header(message, "Date")
    to_recipients = list(_extract_addresses(message.get_all("To", [])))
    return EmailRecord(
        sender=_header(message, "From"),
        to=", ".join(to_recipients) or None,
        subject=_header(message, "Subject"),
        date=date,
        sent_at=parse_header_date(date),
        body=_extract_text_body(message),
        message_id=_header(message, "Message-ID") or None,
        in_reply_to=_header(message, "In-Reply-To") or None,
        references=tuple(_header(message, "References").split()),
        attachments=tuple(_collect_attachments(message)),
    )


def _header(message: EmailMessage, name: str) -> str:
    value = message.get(name)
    return str(value).strip() if value is not None else ""


def _extract_addresses(headers: Iterable[str]) -> Iterable[str]:
    for _, email_address in getaddresses([str(header) for header in headers]):
        if email_address:
            yield email_address


def _extract_text_body(message: EmailMessage) -> str:
    plain_chunks: list[str] = []

    for part in message.walk():
        if part.is_multipart():
            continue
        if part.get_content_disposition() == "attachment":
            continue
        if part.get_content_type() != "text/plain":
            continue
        try:
            content_obj = part.get_content()
        except LookupError:
            continue
        if isinstance(content_obj, str) and content_obj.strip():
            plain_chunks.append(content_obj.strip())

    return "\n\n".join(plain_chunks)


def _collect_attachments(message: EmailMessage) -> Iterable[AttachmentInfo]:
    if not message.is_multipart():
        return
    for part in message.iter_attachments():
        payload = part.get_payload(decode=True) or b""
        yield AttachmentInfo(
            filename=part.get_filename() or "attachment",
            size=len(payload) if payload else None,
        )


__all__ = ["EmailParser", "record_from_message"]
