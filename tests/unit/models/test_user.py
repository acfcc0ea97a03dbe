"""Tests for inbox_reply.models.user."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from inbox_reply.core.exceptions import ContractViolationError
from inbox_reply.models.contacts import ContactDetails
from inbox_reply.models.message import PrimaryAction
from inbox_reply.models.user import (
    ADDRESS_AS_NAME_PROBABILITY,
    NAME_FROM_ADDRESS_PROBABILITY,
    PLAIN_NAME_PROBABILITY,
    User,
)

if TYPE_CHECKING:
    from tests.unit.conftest import MailboxBuilder


@pytest.fixture
def user() -> User:
    return User(user_name="tester", owner_email="me@example.com")


class TestGetContactDetails:
    """Tests for identity lookup and name confidence."""

    def test_same_address_same_identity(self, user: User) -> None:
        a = user.get_contact_details("Alice Smith", "alice@example.com")
        b = user.get_contact_details("Alice", "<ALICE@example.com>")

        assert a is b

    def test_address_only(self, user: User) -> None:
        cd = user.get_contact_details(None, "alice@example.com")

        assert cd.name.value == "alice@example.com"
        assert cd.name.probability == ADDRESS_AS_NAME_PROBABILITY

    def test_name_cut_from_address(self, user: User) -> None:
        cd = user.get_contact_details("alice.smith@example.com", "alice.smith@example.com")

        assert cd.name.value == "alice smith"
        assert cd.name.probability == NAME_FROM_ADDRESS_PROBABILITY

    def test_plain_name_is_certain(self, user: User) -> None:
        cd = user.get_contact_details("Alice Smith", "alice@example.com")

        assert cd.name.value == "Alice Smith"
        assert cd.name.probability == PLAIN_NAME_PROBABILITY

    def test_certain_name_not_overwritten(self, user: User) -> None:
        user.get_contact_details("Alice Smith", "alice@example.com")
        cd = user.get_contact_details("alice@example.com", "alice@example.com")

        assert cd.name.value == "Alice Smith"

    def test_trailing_address_stripped(self, user: User) -> None:
        cd = user.get_contact_details("Alice Smith (alice@example.com)", "alice@example.com")
        assert cd.name.value == "Alice Smith"

    def test_name_only(self, user: User) -> None:
        a = user.get_contact_details("Bob Jones", None)
        b = user.get_contact_details("bob jones", "")

        assert a is b
        assert a.email.value is None

    def test_owner_marked(self, user: User) -> None:
        assert user.get_contact_details("Me", "ME@example.com").is_me
        assert not user.get_contact_details("Alice", "alice@example.com").is_me

    def test_contact_list(self, user: User) -> None:
        contacts = user.get_contact_list(["Alice"], ["alice@example.com", "bob@example.com"])

        assert contacts is not None
        assert [cd.key for cd in contacts] == ["alice@example.com", "bob@example.com"]
        assert user.get_contact_list([], None) is None


class TestMergeContacts:
    """Tests for grouping identities into people."""

    def test_same_name_different_addresses(self, user: User) -> None:
        work = user.get_contact_details("Alice Smith", "alice@work.com")
        home = user.get_contact_details("Alice Smith", "alice@home.com")
        bob = user.get_contact_details("Bob Jones", "bob@example.com")

        user.merge_contacts()

        assert work.person_id == home.person_id
        assert bob.person_id != work.person_id
        assert user.person_of(work).identities == [work, home]

    def test_owner_identities_join_me(self, user: User) -> None:
        primary = user.get_contact_details("Me Myself", "me@example.com")
        alias = user.get_contact_details("Me Myself", "me@alias.com")

        user.merge_contacts()

        assert user.person_of(primary) is user.me
        assert user.person_of(alias) is user.me
        assert alias.is_me

    def test_person_of_unmerged_contact(self, user: User) -> None:
        cd = user.get_contact_details("Carol", "carol@example.com")

        person = user.person_of(cd)

        assert person.identities == [cd]
        assert user.person_of(cd) is person


class TestMessages:
    """Tests for filing messages."""

    def test_add_files_message(self, mailbox: MailboxBuilder, alice: ContactDetails) -> None:
        m = mailbox.message("m1", alice, [mailbox.me])
        user = mailbox.user

        assert user.messages["m1"] is m
        assert user.conversation_of(m) is user.conversations["c1"]
        assert m in user.folders["inbox"].messages
        assert alice.message_count == 1
        assert mailbox.me.message_count == 1

    def test_duplicate_id_rejected(self, mailbox: MailboxBuilder, alice: ContactDetails) -> None:
        mailbox.message("m1", alice)

        with pytest.raises(ContractViolationError, match="Duplicate message id"):
            mailbox.message("m1", alice, minutes=1)

    def test_missing_conversation_id(self, mailbox: MailboxBuilder, alice: ContactDetails) -> None:
        m = mailbox.message("m1", alice, conversation_id=None)

        assert m.conversation_id is not None
        assert mailbox.user.conversations[m.conversation_id].messages == [m]

    def test_is_replied_to(self, mailbox: MailboxBuilder, alice: ContactDetails) -> None:
        question = mailbox.message("m1", alice, [mailbox.me])
        mailbox.message("m2", mailbox.me, [alice], minutes=5)
        user = mailbox.build()

        assert user.is_replied_to(question) is True
        assert user.primary_action(question) is PrimaryAction.REPLY
        assert user.folder_reply_fraction(user.folders["inbox"]) == 0.5

    def test_is_replied_to_without_conversation(self, mailbox: MailboxBuilder, alice: ContactDetails) -> None:
        m = mailbox.message("m1", alice, add=False, conversation_id=None, last_verb_executed_indicates_reply=True)
        assert mailbox.user.is_replied_to(m) is True

    def test_most_recent_message_time(self, mailbox: MailboxBuilder, alice: ContactDetails) -> None:
        assert mailbox.user.most_recent_message_time is None

        mailbox.message("m1", alice, minutes=30)
        latest = mailbox.message("m2", alice, minutes=90, conversation_id="c2")
        mailbox.message("m3", alice, minutes=60)

        assert mailbox.user.most_recent_message_time == latest.date_sent


class TestPartitions:
    """Tests for train/validation/test partitions."""

    def test_partitions_before_split_raise(self, user: User) -> None:
        assert user.has_partitions is False
        with pytest.raises(ContractViolationError, match="before the user's messages were split"):
            _ = user.train_messages

    def test_set_partitions_flags_messages(self, mailbox: MailboxBuilder, alice: ContactDetails) -> None:
        a = mailbox.message("a", alice, minutes=0)
        b = mailbox.message("b", alice, minutes=1)
        c = mailbox.message("c", alice, minutes=2)
        user = mailbox.user

        user.set_partitions([a], [b], [c])

        assert (a.is_training, b.is_validation, c.is_test) == (True, True, True)
        assert user.train_and_validation_messages == [a, b]
        assert user.all_messages == [c, b, a]

        user.set_partitions([c], [], [])
        assert a.is_training is False
        assert c.is_training is True and c.is_test is False

    def test_train_contacts(
        self, mailbox: MailboxBuilder, alice: ContactDetails, bob: ContactDetails
    ) -> None:
        m1 = mailbox.message("m1", alice, [mailbox.me], conversation_id="c1")
        m2 = mailbox.message("m2", bob, [mailbox.me], conversation_id="c2")
        m3 = mailbox.message("m3", mailbox.me, [bob], conversation_id="c2", minutes=5)
        user = mailbox.build()
        user.set_partitions([m1, m2, m3], [], [])

        people = user.train_contacts

        assert people == [user.person_of(alice), user.person_of(bob)]
        assert user.train_identities == [mailbox.me]

    def test_top_senders(self, mailbox: MailboxBuilder, alice: ContactDetails, bob: ContactDetails) -> None:
        messages = [
            mailbox.message("a1", alice, [mailbox.me], conversation_id="ca", minutes=0),
            mailbox.message("a2", alice, [mailbox.me], conversation_id="ca", minutes=1),
            mailbox.message("r1", mailbox.me, [alice], conversation_id="ca", minutes=2),
            mailbox.message("b1", bob, [mailbox.me], conversation_id="cb", minutes=3),
        ]
        user = mailbox.build()
        user.set_partitions(messages, [], [])

        counts = user.top_sender_counts()

        assert [c.person for c in counts] == [user.person_of(alice), user.person_of(bob)]
        assert (counts[0].positive, counts[0].negative) == (1, 1)
        assert counts[0].fraction == 0.5
        assert user.top_sender_fractions() == {"Alice Smith (2)": 0.5, "Bob Jones (1)": 0.0}
