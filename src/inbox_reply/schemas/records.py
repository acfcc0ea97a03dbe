"""Pydantic schemas for raw message records handed over for ingestion."""

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from inbox_reply.models.message import FlagState


class ContactRecord(BaseModel):
    """A name/address pair from a message header."""

    name: str | None = None
    email: str | None = None

    model_config = ConfigDict(extra="ignore")


class AttachmentRecord(BaseModel):
    """Attachment metadata."""

    name: str = ""
    size: int = Field(default=0, ge=0)
    is_inline: bool = False
    is_file: bool = True

    model_config = ConfigDict(extra="ignore")


class MessageRecord(BaseModel):
    """One message as exported from the mail store.

    ``to`` and ``cc`` are None when the store had no recipient list at all,
    which is different from an empty list.
    """

    message_id: str = Field(..., min_length=1)
    conversation_id: str | None = None
    internet_message_id: str | None = None
    in_reply_to_id: str | None = None
    subject: str | None = None
    summary: str | None = None
    body: str | None = None
    sender: ContactRecord | None = None
    to: list[ContactRecord] | None = Field(default_factory=list)
    cc: list[ContactRecord] | None = Field(default_factory=list)
    date_sent: AwareDatetime
    date_received: AwareDatetime | None = None
    folder: str | None = None
    flag: FlagState = FlagState.NOT_FLAGGED
    is_read: bool = False
    is_deleted: bool = False
    is_flagged_by_sender: bool = False
    item_class: str | None = None
    last_modified_name: str | None = None
    last_modified_time: AwareDatetime | None = None
    last_verb_executed_indicates_reply: bool | None = None
    attachments: list[AttachmentRecord] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")
