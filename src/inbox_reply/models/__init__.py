"""Mailbox domain model: messages, conversations, people and folders."""

from inbox_reply.models.contacts import ContactDetails, Person, normalize_name, unknown_person
from inbox_reply.models.conversation import (
    Conversation,
    ConversationStartedByMe,
    ForwardType,
    ReplyToMessageFromMe,
    ThreadingResult,
    compute_threading,
)
from inbox_reply.models.folder import MessageFolder
from inbox_reply.models.message import Attachment, FlagState, FromMe, Message, PrimaryAction, ToMe
from inbox_reply.models.uncertain import Uncertain
from inbox_reply.models.user import SenderCount, User

__all__ = [
    "Attachment",
    "ContactDetails",
    "Conversation",
    "ConversationStartedByMe",
    "FlagState",
    "ForwardType",
    "FromMe",
    "Message",
    "MessageFolder",
    "Person",
    "PrimaryAction",
    "ReplyToMessageFromMe",
    "SenderCount",
    "ThreadingResult",
    "ToMe",
    "Uncertain",
    "User",
    "compute_threading",
    "normalize_name",
    "unknown_person",
]
