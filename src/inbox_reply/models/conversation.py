"""Conversations and the reply-threading engine.

A conversation owns its messages in chronological order. Depth and reply
links are not cached implicitly: callers run :meth:`Conversation.rebuild`
after mutating the message list, which returns an immutable
:class:`ThreadingResult`. Reading depth or reply data while the result is
stale raises :class:`~inbox_reply.core.exceptions.ThreadingNotComputedError`.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import structlog

from inbox_reply.core.exceptions import ThreadingNotComputedError
from inbox_reply.models.contacts import ContactDetails
from inbox_reply.models.folder import MessageFolder
from inbox_reply.models.message import FlagState, Message

logger = structlog.get_logger(__name__)

# Conversation subjects drop prefixes whose colon sits at one of these positions
MIN_PREFIX_COLON = 1
MAX_PREFIX_COLON = 3


class ConversationStartedByMe(str, Enum):
    YES = "yes"
    NO = "no"
    THIS_IS_FIRST_MESSAGE = "this_is_first_message"


class ReplyToMessageFromMe(str, Enum):
    YES = "yes"
    NO = "no"
    THIS_IS_FIRST_MESSAGE = "this_is_first_message"
    DONT_KNOW = "dont_know"


class ForwardType(str, Enum):
    YES = "yes"
    NO = "no"
    NO_BUT_CONVERSATION_WAS_STARTED_BY_FORWARD = "no_but_conversation_was_started_by_forward"


@dataclass(frozen=True)
class ThreadingResult:
    """Depths and reply links for one snapshot of a conversation.

    Attributes:
        message_ids: Message ids in chronological order.
        depths: Reply-hop distance from a thread root, per message id.
        parents: Id of the message replied to, or None for roots.
        replies: Ids of the direct replies to each message, in order.
        orphan_ids: Messages after the first for which no parent was found.
    """

    message_ids: tuple[str, ...] = ()
    depths: Mapping[str, int] = field(default_factory=dict)
    parents: Mapping[str, str | None] = field(default_factory=dict)
    replies: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    orphan_ids: frozenset[str] = frozenset()

    @property
    def roots(self) -> list[str]:
        return [mid for mid in self.message_ids if self.parents[mid] is None]


def _person_keys(contacts: Iterable[ContactDetails] | None) -> set[str]:
    return {cd.person_key for cd in contacts or []}


def _find_parent(messages: list[Message], i: int) -> int | None:
    """Index of the message that ``messages[i]`` replies to, if any.

    An explicit In-Reply-To header wins. Otherwise the latest earlier
    message whose sender is on the To line is taken, then the latest whose
    sender is on the Cc line.
    """
    m = messages[i]
    if m.in_reply_to_id:
        for j in range(i - 1, -1, -1):
            if messages[j].internet_message_id == m.in_reply_to_id:
                return j

    for recipients in (m.sent_to, m.copied_to):
        if recipients is None:
            continue
        keys = _person_keys(recipients)
        for j in range(i - 1, -1, -1):
            sender = messages[j].sender
            if sender is not None and sender.person_key in keys:
                return j
    return None


def compute_threading(messages: list[Message]) -> ThreadingResult:
    """Assign depths and reply links to a chronologically sorted message list."""
    depths: dict[str, int] = {}
    parents: dict[str, str | None] = {}
    replies: dict[str, list[str]] = {m.message_id: [] for m in messages}
    orphans: set[str] = set()

    for i, m in enumerate(messages):
        depths[m.message_id] = 0
        parents[m.message_id] = None
        if i == 0:
            continue
        j = _find_parent(messages, i)
        if j is None:
            orphans.add(m.message_id)
            continue
        parent_id = messages[j].message_id
        depths[m.message_id] = depths[parent_id] + 1
        parents[m.message_id] = parent_id
        replies[parent_id].append(m.message_id)

    return ThreadingResult(
        message_ids=tuple(m.message_id for m in messages),
        depths=depths,
        parents=parents,
        replies={k: tuple(v) for k, v in replies.items()},
        orphan_ids=frozenset(orphans),
    )


@dataclass(eq=False)
class Conversation:
    """A thread of messages sharing one conversation id."""

    conversation_id: str
    messages: list[Message] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._threading: ThreadingResult | None = None
        self._by_id: dict[str, Message] = {m.message_id: m for m in self.messages}

    # Mutation

    def add_message(self, message: Message) -> None:
        """Insert a message keeping the list sorted by send date.

        Messages with equal dates keep their insertion order.
        """
        i = 0
        while i < len(self.messages) and not message.date_sent < self.messages[i].date_sent:
            i += 1
        self.messages.insert(i, message)
        self._by_id[message.message_id] = message
        message.conversation_id = self.conversation_id
        self._threading = None

    def remove_message(self, message: Message) -> None:
        self.messages.remove(message)
        self._by_id.pop(message.message_id, None)
        self._threading = None

    # Threading

    def rebuild(self) -> ThreadingResult:
        """Recompute depths and reply links for the current message list."""
        result = compute_threading(self.messages)
        if result.orphan_ids:
            logger.debug(
                "conversation_orphans",
                conversation_id=self.conversation_id,
                orphans=sorted(result.orphan_ids),
                messages=len(self.messages),
            )
        self._threading = result
        return result

    @property
    def is_threaded(self) -> bool:
        return self._threading is not None

    @property
    def threading(self) -> ThreadingResult:
        if self._threading is None:
            raise ThreadingNotComputedError(self.conversation_id)
        return self._threading

    def depth_of(self, message: Message) -> int:
        return self.threading.depths[message.message_id]

    def parent_of(self, message: Message) -> Message | None:
        parent_id = self.threading.parents[message.message_id]
        return None if parent_id is None else self._by_id[parent_id]

    def replies_of(self, message: Message) -> list[Message]:
        return [self._by_id[mid] for mid in self.threading.replies[message.message_id]]

    def find_reply(self, message: Message) -> Message | None:
        """First direct reply to ``message`` sent by the mailbox owner."""
        for reply in self.replies_of(message):
            if reply.is_from_me:
                return reply
        return None

    def is_message_replied_to(self, message: Message) -> bool:
        """Ground-truth reply label for one of this conversation's messages."""
        if self.find_reply(message) is not None:
            return True
        return bool(message.last_verb_executed_indicates_reply)

    def conversation_view_list(self) -> list[Message]:
        """Depth-first listing of each reply tree, then any unattached messages."""
        if not self.messages:
            return []
        threading = self.threading
        listed: list[Message] = []

        def visit(mid: str) -> None:
            listed.append(self._by_id[mid])
            for child in threading.replies[mid]:
                visit(child)

        for mid in threading.message_ids:
            if threading.depths[mid] == 0:
                visit(mid)
        seen = {m.message_id for m in listed}
        listed.extend(m for m in self.messages if m.message_id not in seen)
        return listed

    # Positional attributes of one message

    def index_of(self, message: Message) -> int:
        return self.messages.index(message)

    def started_by_me(self, message: Message) -> ConversationStartedByMe:
        if self.index_of(message) == 0:
            return ConversationStartedByMe.THIS_IS_FIRST_MESSAGE
        return ConversationStartedByMe.YES if self.messages[0].is_from_me else ConversationStartedByMe.NO

    def previous_replies(self, message: Message) -> int:
        """Messages from the owner before this one, ignoring the first message."""
        k = self.index_of(message)
        return sum(1 for m in self.messages[1:k] if m.is_from_me)

    def previous_unread(self, message: Message) -> int:
        k = self.index_of(message)
        return sum(1 for m in self.messages[:k] if not m.is_read)

    def length_except_starter(self, message: Message) -> int:
        count = self.index_of(message)
        if count > 0 and self.messages[0].is_from_me:
            count -= 1
        return count

    def forward_type(self, message: Message) -> ForwardType:
        if message.is_forward:
            return ForwardType.YES
        if self.messages[0].is_forward:
            return ForwardType.NO_BUT_CONVERSATION_WAS_STARTED_BY_FORWARD
        return ForwardType.NO

    def switched_to_to_line(self, message: Message) -> bool:
        """Whether the owner moved onto the To line since the last message from someone else."""
        if message.sent_to is None or not message.to_line:
            return False
        k = self.index_of(message)
        for previous in reversed(self.messages[:k]):
            if previous.is_from_me:
                continue
            return not previous.to_line
        return False

    def reply_to_message_from_me(self, message: Message) -> ReplyToMessageFromMe:
        if self.index_of(message) == 0:
            return ReplyToMessageFromMe.THIS_IS_FIRST_MESSAGE
        parent = self.parent_of(message)
        if parent is None:
            return ReplyToMessageFromMe.DONT_KNOW
        return ReplyToMessageFromMe.YES if parent.is_from_me else ReplyToMessageFromMe.NO

    def is_in_conversation_with_meeting(self, message: Message) -> bool:
        k = self.index_of(message)
        return any(m.is_meeting_request for m in self.messages[:k])

    def proportions_and_size(self, message: Message) -> str:
        """Owner's share of the earlier messages, e.g. "030% of 07"."""
        k = self.index_of(message)
        contributed = sum(1 for m in self.messages[:k] if m.is_from_me)
        frac = round(10.0 * contributed / (k + 1e-10))
        return f"{frac:02d}0% of {k:02d}"

    def previous_messages(self, message: Message) -> list[Message]:
        return self.messages[: self.index_of(message)]

    # Aggregates

    @property
    def subject(self) -> str:
        s = (self.messages[0].subject or "") if self.messages else ""
        while True:
            s = s.lstrip()
            k = s.find(":")
            if MIN_PREFIX_COLON <= k <= MAX_PREFIX_COLON:
                s = s[k + 1 :]
            else:
                return s

    @property
    def folder(self) -> MessageFolder | None:
        """Folder of the latest message that is not in Sent Items."""
        folder = None
        for m in reversed(self.messages):
            folder = m.folder
            if folder is not None and not folder.is_sent_items:
                return folder
        return folder

    @property
    def is_passive(self) -> bool:
        return not any(m.is_from_me for m in self.messages)

    @property
    def is_replied_to(self) -> bool:
        return any(self.is_message_replied_to(m) for m in self.messages)

    @property
    def date(self) -> datetime | None:
        return self.messages[-1].date_sent if self.messages else None

    @property
    def has_attachments(self) -> bool:
        return any(m.has_attachments for m in self.messages)

    @property
    def probability_of_reply(self) -> float:
        return max(
            (0.0 if math.isnan(m.probability_of_reply) else m.probability_of_reply for m in self.messages),
            default=0.0,
        )

    @property
    def flag(self) -> FlagState:
        flags = {m.flag for m in self.messages}
        if FlagState.FLAGGED in flags:
            return FlagState.FLAGGED
        if FlagState.FLAGGED_COMPLETE in flags:
            return FlagState.FLAGGED_COMPLETE
        return FlagState.NOT_FLAGGED

    @property
    def from_(self) -> ContactDetails | None:
        return self.messages[0].sender if self.messages else None

    @property
    def contributors(self) -> list[ContactDetails]:
        senders: list[ContactDetails] = []
        for m in self.messages:
            if m.sender is not None and m.sender not in senders:
                senders.append(m.sender)
        return senders

    @property
    def is_read(self) -> bool:
        return all(m.is_read for m in self.messages)

    @property
    def participating_contacts(self) -> list[ContactDetails]:
        contacts: list[ContactDetails] = []
        for m in self.messages:
            for cd in [*([m.sender] if m.sender else []), *(m.sent_to or []), *(m.copied_to or [])]:
                if cd not in contacts:
                    contacts.append(cd)
        return contacts

    @property
    def participants(self) -> list[str]:
        """Distinct person keys of everyone taking part."""
        keys: list[str] = []
        for cd in self.participating_contacts:
            if cd.person_key not in keys:
                keys.append(cd.person_key)
        return keys

    def __len__(self) -> int:
        return len(self.messages)

    def __str__(self) -> str:
        return self.subject

    def __repr__(self) -> str:
        return f"Conversation({self.conversation_id!r}, messages={len(self.messages)})"
