"""Pydantic schemas for inbox-reply."""

from inbox_reply.schemas.records import AttachmentRecord, ContactRecord, MessageRecord

__all__ = [
    "AttachmentRecord",
    "ContactRecord",
    "MessageRecord",
]
