"""A single email message and the attributes derived from it.

Fields that come from the mail store are plain dataclass fields. Derived
attributes that only need the message itself are properties; attributes
that depend on the surrounding conversation live on
:class:`~inbox_reply.models.conversation.Conversation`, which owns the
message list. A message refers to its conversation by id only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING

from inbox_reply.core.text import parse_words

if TYPE_CHECKING:
    from collections.abc import Callable

    from inbox_reply.models.contacts import ContactDetails, Person
    from inbox_reply.models.folder import MessageFolder

# Longest prefix (characters before ':') still treated as a subject prefix
MAX_SUBJECT_PREFIX = 5

MEETING_REQUEST_CLASS = "IPM.Schedule.Meeting.Request"


class FlagState(str, Enum):
    """Follow-up flag on a message."""

    NOT_FLAGGED = "not_flagged"
    FLAGGED = "flagged"
    FLAGGED_COMPLETE = "flagged_complete"


class PrimaryAction(str, Enum):
    """The most significant thing the owner did with a message."""

    NOT_READ = "not_read"
    READ = "read"
    MOVE = "move"
    DELETE = "delete"
    REPLY = "reply"
    FLAG = "flag"


class FromMe(str, Enum):
    """How a message sent by the owner was addressed."""

    FROM_ME_TO_ONLY_ME = "from_me_to_only_me"
    FORWARD_FROM_ME_TO_ONLY_ME = "forward_from_me_to_only_me"
    FROM_ME_TO_ME_AND_OTHERS = "from_me_to_me_and_others"
    FORWARD_FROM_ME_TO_ME_AND_OTHERS = "forward_from_me_to_me_and_others"
    FROM_ME_CC_ME = "from_me_cc_me"
    NOT_FROM_ME = "not_from_me"


class ToMe(str, Enum):
    """Whether the owner is the only direct recipient."""

    TO_ONLY_ME = "to_only_me"
    TO_ONLY_ME_WITH_CC = "to_only_me_with_cc"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Attachment:
    """Attachment metadata."""

    name: str = ""
    size: int = 0
    is_inline: bool = False
    is_file: bool = False


@dataclass(eq=False)
class Message:
    """An email message.

    Attributes:
        message_id: Stable id, unique within the owning user.
        date_sent: When the message was sent.
        sender: Sender identity, may be missing.
        sent_to: To-line identities; None when the store had no list.
        copied_to: Cc-line identities; None when the store had no list.
        conversation_id: Id of the conversation this message belongs to.
        internet_message_id: RFC 5322 Message-ID header, if known.
        in_reply_to_id: In-Reply-To header, if known.
    """

    message_id: str
    date_sent: datetime
    sender: ContactDetails | None = None
    sent_to: list[ContactDetails] | None = field(default_factory=list)
    copied_to: list[ContactDetails] | None = field(default_factory=list)
    subject: str | None = None
    summary: str | None = None
    body: str | None = None
    date_received: datetime | None = None
    conversation_id: str | None = None
    internet_message_id: str | None = None
    in_reply_to_id: str | None = None
    folder: MessageFolder | None = None
    flag: FlagState = FlagState.NOT_FLAGGED
    is_read: bool = False
    is_deleted: bool = False
    is_flagged_by_sender: bool = False
    item_class: str | None = None
    last_modified_name: str | None = None
    last_modified_time: datetime | None = None
    last_verb_executed_indicates_reply: bool | None = None
    attachments: list[Attachment] = field(default_factory=list)
    probability_of_reply: float = math.nan
    is_training: bool = False
    is_validation: bool = False
    is_test: bool = False

    def __post_init__(self) -> None:
        if self.date_received is None:
            self.date_received = self.date_sent

    # Attachments

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)

    @property
    def inline_attachments(self) -> list[Attachment]:
        return [a for a in self.attachments if a.is_inline]

    @property
    def message_attachments(self) -> list[Attachment]:
        """Attached messages (neither files nor inline content)."""
        return [a for a in self.attachments if not a.is_file and not a.is_inline]

    # Subject and body text

    @property
    def is_forward(self) -> bool:
        if not self.subject:
            return False
        s = self.subject.strip().lower()
        return s.startswith("fw:") or s.startswith("fwd:")

    @property
    def subject_prefix(self) -> str | None:
        """Lower-cased text before the first colon, e.g. "re" or "fwd"."""
        if not self.subject:
            return None
        s = self.subject.strip().lower()
        k = s.find(":")
        if k < 0 or k > MAX_SUBJECT_PREFIX:
            return None
        return s[:k].strip()

    @property
    def subject_without_prefix(self) -> str:
        if not self.subject:
            return ""
        s = self.subject.strip()
        while True:
            k = s.find(":")
            if k < 0 or k > MAX_SUBJECT_PREFIX:
                return s
            s = s[k + 1 :].strip()

    @cached_property
    def subject_words(self) -> list[str]:
        return parse_words(self.subject_without_prefix.strip().lower())

    @cached_property
    def new_text(self) -> str:
        """Summary text written for this message, excluding quoted history."""
        if not self.summary:
            return ""
        k = self.summary.find("From:", 1)
        return self.summary.strip() if k == -1 else self.summary[:k].strip()

    @cached_property
    def new_text_words(self) -> list[str]:
        return parse_words(self.new_text.strip().lower())

    @property
    def new_text_length(self) -> int:
        return len(self.new_text_words)

    @property
    def message_body(self) -> str | None:
        return self.body if self.body is not None else self.summary

    # Sender

    @property
    def is_potential_auto_sender(self) -> bool:
        """Whether the sender looks like an automated mailer."""
        if self.sender is None or self.sender.email.value is None:
            return False
        email = self.sender.email.value
        k = email.find("@")
        if k != -1 and _contains_auto_sender_indicator(email[:k]):
            return True
        return _contains_auto_sender_indicator(self.sender.name.value or "")

    @property
    def sender_domain(self) -> str | None:
        if self.sender is None or self.sender.email.value is None:
            return ""
        s = self.sender.email.value
        k = s.find("@")
        return None if k == -1 else s[k + 1 :]

    @property
    def from_me(self) -> FromMe:
        """Classify a message sent by the owner by how it was addressed."""
        if self.sender is None or not self.sender.is_me:
            return FromMe.NOT_FROM_ME

        sent_to = self.sent_to or []
        if len(sent_to) == 1 and sent_to[0].is_me:
            return FromMe.FORWARD_FROM_ME_TO_ONLY_ME if self.is_forward else FromMe.FROM_ME_TO_ONLY_ME

        if any(cd.is_me for cd in self.copied_to or []):
            return FromMe.FROM_ME_CC_ME

        if self.is_forward:
            return FromMe.FORWARD_FROM_ME_TO_ME_AND_OTHERS
        return FromMe.FROM_ME_TO_ME_AND_OTHERS

    @property
    def is_from_me(self) -> bool:
        return self.sender is not None and self.sender.is_me

    # Recipients

    @property
    def participating_contacts(self) -> list[ContactDetails]:
        """Distinct identities on To, Cc and From, in that order."""
        if self.sent_to is None:
            return []
        contacts: list[ContactDetails] = []
        for cd in [*self.sent_to, *(self.copied_to or []), *([self.sender] if self.sender else [])]:
            if cd not in contacts:
                contacts.append(cd)
        return contacts

    @property
    def recipients(self) -> list[str] | None:
        """Distinct person keys on the To and Cc lines."""
        if self.sent_to is None:
            return None
        keys: list[str] = []
        for cd in [*self.sent_to, *(self.copied_to or [])]:
            if cd.person_key not in keys:
                keys.append(cd.person_key)
        return keys

    @property
    def to_line(self) -> bool:
        """Whether the owner is on the To line."""
        return any(cd.is_me for cd in self.sent_to or [])

    @property
    def cc_line(self) -> bool:
        """Whether the owner is on the Cc line."""
        return any(cd.is_me for cd in self.copied_to or [])

    @property
    def sent_to_and_cc_me(self) -> bool:
        return self.to_line and self.cc_line

    @property
    def cc_position(self) -> int:
        """Position of the owner on the Cc line, -1 when absent."""
        if self.copied_to is None:
            return -1
        for i, cd in enumerate(self.copied_to):
            if cd.is_me:
                return i
        return -1

    @property
    def sent_to_only_me(self) -> ToMe:
        if self.sent_to is None or len(self.sent_to) != 1 or not self.sent_to[0].is_me:
            return ToMe.OTHER
        return ToMe.TO_ONLY_ME_WITH_CC if self.copied_to else ToMe.TO_ONLY_ME

    @property
    def received_as(self) -> ContactDetails | None:
        """The identity under which the owner received this message."""
        for cd in self.sent_to or []:
            if cd.is_me:
                return cd
        for cd in self.copied_to or []:
            if cd.is_me:
                return cd
        if self.sent_to is not None and len(self.sent_to) == 1:
            return self.sent_to[0]
        if not self.sent_to and self.copied_to is not None and len(self.copied_to) == 1:
            return self.copied_to[0]
        return self.sender

    # Actions

    def primary_action(self, is_replied_to: bool) -> PrimaryAction:
        """The most significant action taken on this message.

        Args:
            is_replied_to: Reply status from the owning conversation.
        """
        if self.flag != FlagState.NOT_FLAGGED and not self.is_flagged_by_sender:
            return PrimaryAction.FLAG
        if is_replied_to:
            return PrimaryAction.REPLY
        if self.is_deleted:
            return PrimaryAction.DELETE
        if self.folder is not None and self.folder.is_user_folder:
            return PrimaryAction.MOVE
        if self.is_read:
            return PrimaryAction.READ
        return PrimaryAction.NOT_READ

    def was_moved_by_rule(self, person_of: Callable[[ContactDetails], Person] | None = None) -> bool:
        return self.folder is not None and self.folder.is_move_target(person_of)

    @property
    def train_val_test(self) -> str:
        if self.is_training:
            return "Dataset: Train"
        if self.is_validation:
            return "Dataset: Validation"
        if self.is_test:
            return "Dataset: Test"
        return ""

    @property
    def is_meeting_request(self) -> bool:
        return self.item_class == MEETING_REQUEST_CLASS

    def __str__(self) -> str:
        to = "; ".join(str(cd) for cd in [*(self.sent_to or []), *(self.copied_to or [])])
        return f"{self.subject}\tfrom: {self.sender}\tto: {to}"

    def __repr__(self) -> str:
        return f"Message({self.message_id!r})"


def _contains_auto_sender_indicator(s: str) -> bool:
    s = s.lower()
    if "auto" in s:
        return True
    s = s.replace(" ", "").replace("-", "")
    return "noreply" in s or "notreply" in s
