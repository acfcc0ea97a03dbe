"""Shared builders for mailbox fixtures."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from inbox_reply.models.contacts import ContactDetails
from inbox_reply.models.message import Message
from inbox_reply.models.user import User

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
OWNER_EMAIL = "me@example.com"


class MailboxBuilder:
    """Builds a user with messages timed in minutes after ``BASE_TIME``."""

    base_time = BASE_TIME

    def __init__(self, owner_email: str = OWNER_EMAIL) -> None:
        self.user = User(user_name="tester", owner_email=owner_email)
        self.me = self.contact("Me Myself", owner_email)

    def contact(self, name: str | None, email: str | None = None) -> ContactDetails:
        return self.user.get_contact_details(name, email)

    def message(
        self,
        message_id: str,
        sender: ContactDetails | None,
        to: list[ContactDetails] | None = None,
        cc: list[ContactDetails] | None = None,
        minutes: float = 0,
        conversation_id: str | None = "c1",
        folder: str | None = "Inbox",
        add: bool = True,
        **kwargs: Any,
    ) -> Message:
        message = Message(
            message_id=message_id,
            date_sent=BASE_TIME + timedelta(minutes=minutes),
            sender=sender,
            sent_to=list(to) if to is not None else [],
            copied_to=list(cc) if cc is not None else [],
            conversation_id=conversation_id,
            folder=self.user.get_or_create_folder(folder) if folder is not None else None,
            **kwargs,
        )
        if add:
            self.user.add_message(message)
        return message

    def build(self) -> User:
        """Merge contacts and thread every conversation."""
        self.user.merge_contacts()
        self.user.rebuild_conversations()
        return self.user


@pytest.fixture
def mailbox() -> MailboxBuilder:
    """Create an empty mailbox builder."""
    return MailboxBuilder()


@pytest.fixture
def alice(mailbox: MailboxBuilder) -> ContactDetails:
    return mailbox.contact("Alice Smith", "alice@example.com")


@pytest.fixture
def bob(mailbox: MailboxBuilder) -> ContactDetails:
    return mailbox.contact("Bob Jones", "bob@example.com")


@pytest.fixture
def carol(mailbox: MailboxBuilder) -> ContactDetails:
    return mailbox.contact("Carol White", "carol@example.com")
