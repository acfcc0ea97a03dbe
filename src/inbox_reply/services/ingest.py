"""Build a user's model graph from exported message records."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from inbox_reply.models.contacts import ContactDetails
from inbox_reply.models.message import Attachment, Message
from inbox_reply.models.user import User
from inbox_reply.schemas.records import ContactRecord, MessageRecord

if TYPE_CHECKING:
    from inbox_reply.core.types import MessageData

logger = structlog.get_logger(__name__)


def load_records(path: Path) -> list[MessageData]:
    """Read one JSON object per non-blank line.

    Args:
        path: JSON Lines file.

    Returns:
        The decoded objects, in file order.
    """
    records: list[MessageData] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            if line.strip():
                records.append(json.loads(line))
    logger.info("records_loaded", path=str(path), count=len(records))
    return records


def _contacts(user: User, records: list[ContactRecord] | None) -> list[ContactDetails] | None:
    if records is None:
        return None
    return [user.get_contact_details(r.name, r.email) for r in records]


def _message_from_record(user: User, record: MessageRecord) -> Message:
    sender = None
    if record.sender is not None:
        sender = user.get_contact_details(record.sender.name, record.sender.email)
    return Message(
        message_id=record.message_id,
        date_sent=record.date_sent,
        date_received=record.date_received,
        sender=sender,
        sent_to=_contacts(user, record.to),
        copied_to=_contacts(user, record.cc),
        subject=record.subject,
        summary=record.summary,
        body=record.body,
        conversation_id=record.conversation_id,
        internet_message_id=record.internet_message_id,
        in_reply_to_id=record.in_reply_to_id,
        folder=user.get_or_create_folder(record.folder) if record.folder is not None else None,
        flag=record.flag,
        is_read=record.is_read,
        is_deleted=record.is_deleted,
        is_flagged_by_sender=record.is_flagged_by_sender,
        item_class=record.item_class,
        last_modified_name=record.last_modified_name,
        last_modified_time=record.last_modified_time,
        last_verb_executed_indicates_reply=record.last_verb_executed_indicates_reply,
        attachments=[Attachment(a.name, a.size, a.is_inline, a.is_file) for a in record.attachments],
    )


def ingest_records(
    records: Iterable[MessageData | MessageRecord],
    owner_email: str | None,
    user_name: str | None = None,
) -> User:
    """Validate records and assemble them into a threaded ``User``.

    Contacts are merged into people before messages are filed, and every
    conversation is threaded before returning, so reply labels can be read
    straight away.

    Args:
        records: Raw dictionaries or already validated records.
        owner_email: Mailbox owner's address, marks the owner's identities.
        user_name: Display name; defaults to the owner's address.

    Returns:
        The populated user.

    Raises:
        pydantic.ValidationError: If a record is malformed.
        ContractViolationError: If two records share a message id.
    """
    validated = [r if isinstance(r, MessageRecord) else MessageRecord.model_validate(r) for r in records]
    user = User(user_name=user_name or owner_email or "user", owner_email=owner_email)

    messages = [_message_from_record(user, r) for r in validated]
    user.merge_contacts()
    for message in messages:
        user.add_message(message)
    user.rebuild_conversations()

    logger.info(
        "records_ingested",
        user=user.user_name,
        messages=len(user.messages),
        conversations=len(user.conversations),
        people=len(user.people),
        folders=len(user.folders),
    )
    return user
