"""Mailbox folders and the role heuristics derived from their names."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inbox_reply.models.contacts import ContactDetails, Person
    from inbox_reply.models.message import Message

# A move within this many seconds of receipt counts as a quick move
QUICK_MOVE_SECONDS = 600.0

# Share of quick moves above which a folder is treated as a rule target.
QUICK_MOVE_PROPORTION = 0.3


@dataclass(eq=False)
class MessageFolder:
    """A named bucket of messages.

    Role flags are computed from the folder name on first access and cached
    for the lifetime of the folder; they can also be assigned directly.
    """

    name: str | None
    folder_id: str | None = None
    messages: list[Message] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._is_move_target: bool | None = None
        self._reply_fraction: float | None = None

    @property
    def _lower(self) -> str:
        return (self.name or "").lower()

    @cached_property
    def is_inbox(self) -> bool:
        return self._lower == "inbox"

    @cached_property
    def is_sent_items(self) -> bool:
        return "sent items" in self._lower

    @cached_property
    def is_junk_email(self) -> bool:
        return "junk" in self._lower and "mail" in self._lower

    @cached_property
    def is_drafts(self) -> bool:
        return self._lower == "drafts"

    @cached_property
    def is_deleted(self) -> bool:
        return "deleted items" in self._lower

    @cached_property
    def is_conversation_history(self) -> bool:
        return "conversation history" in self._lower

    @property
    def is_user_folder(self) -> bool:
        """Whether the user created this folder (none of the special roles)."""
        return not (
            self.is_inbox
            or self.is_junk_email
            or self.is_sent_items
            or self.is_deleted
            or self.is_drafts
            or self.is_conversation_history
        )

    def add_message(self, message: Message) -> None:
        if message not in self.messages:
            self.messages.append(message)

    def is_move_target(self, person_of: Callable[[ContactDetails], Person] | None = None) -> bool:
        """Whether messages seem to land here through an automatic rule.

        A message counts as moved by a rule when its last modification came
        from its own sender (or is anonymous) and happened within
        ``QUICK_MOVE_SECONDS`` of receipt. Computed once and cached.

        Args:
            person_of: Resolves a sender identity to its person so that all
                of the sender's certain names are checked against the
                modifier name. Without it only the sender identity is used.

        Returns:
            True when more than ``QUICK_MOVE_PROPORTION`` of the messages
            were moved quickly.
        """
        if self._is_move_target is not None:
            return self._is_move_target

        if self.is_sent_items or self.is_drafts or self.is_deleted or self.is_inbox or self.is_junk_email:
            self._is_move_target = False
            return False

        count = 0
        auto_count = 0
        for message in self.messages:
            if message.last_modified_name:
                identities = []
                if message.sender is not None:
                    identities = (
                        person_of(message.sender).identities if person_of else [message.sender]
                    )
                mover_is_sender = any(
                    cd.name.is_certain and cd.name.value == message.last_modified_name for cd in identities
                )
                # Moved by someone other than the sender: a manual move
                if not mover_is_sender:
                    count += 1
                    continue

            if message.last_modified_time is None:
                continue

            seconds = (message.last_modified_time - message.date_received).total_seconds()
            if seconds < QUICK_MOVE_SECONDS:
                auto_count += 1
            count += 1

        proportion = 0.0 if count == 0 else auto_count / count
        self._is_move_target = proportion > QUICK_MOVE_PROPORTION
        return self._is_move_target

    def set_move_target(self, value: bool) -> None:
        self._is_move_target = value

    def reply_fraction(self, is_replied_to: Callable[[Message], bool]) -> float:
        """Fraction of this folder's messages that were replied to (cached)."""
        if self._reply_fraction is None:
            if not self.messages:
                self._reply_fraction = 0.0
            else:
                replied = sum(1 for m in self.messages if is_replied_to(m))
                self._reply_fraction = replied / len(self.messages)
        return self._reply_fraction

    def __str__(self) -> str:
        return self.name or ""
