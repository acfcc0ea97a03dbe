"""Shared type definitions."""

from __future__ import annotations

from typing import TypedDict


class ContactData(TypedDict, total=False):
    """One name/address pair as it appears on a message header."""

    name: str | None
    email: str | None


class AttachmentData(TypedDict, total=False):
    """Attachment metadata."""

    name: str
    size: int
    is_inline: bool
    is_file: bool


class MessageData(TypedDict, total=False):
    """Raw message data handed over by the ingestion collaborator."""

    message_id: str
    conversation_id: str | None
    internet_message_id: str | None
    in_reply_to_id: str | None
    subject: str | None
    summary: str | None
    body: str | None
    sender: ContactData
    to: list[ContactData]
    cc: list[ContactData]
    date_sent: str  # ISO format datetime
    date_received: str | None  # ISO format datetime
    folder: str | None
    flag: str  # 'not_flagged', 'flagged', 'flagged_complete'
    is_read: bool
    is_deleted: bool
    is_flagged_by_sender: bool
    item_class: str | None
    last_modified_name: str | None
    last_modified_time: str | None  # ISO format datetime
    last_verb_executed_indicates_reply: bool | None
    attachments: list[AttachmentData]

