"""The mailbox owner and everything loaded for them.

``User`` is the arena of the model graph: it owns messages, conversations,
contact identities, people and folders, each keyed by a stable id.
Objects refer to each other through those ids (a message holds its
conversation id, an identity holds its person id) and cross-object
questions are answered here.
"""

from __future__ import annotations

import itertools
import uuid
from collections import Counter as TallyCounter
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

import structlog

from inbox_reply.core.exceptions import ContractViolationError
from inbox_reply.models.contacts import ContactDetails, Person, normalize_name
from inbox_reply.models.conversation import Conversation
from inbox_reply.models.folder import MessageFolder
from inbox_reply.models.message import Message, PrimaryAction
from inbox_reply.models.uncertain import Uncertain

if TYPE_CHECKING:
    from inbox_reply.features.base import Feature, FeatureBucket, FeatureType

logger = structlog.get_logger(__name__)

ME_PERSON_ID = "me"

# Confidence assigned to names depending on where they came from
ADDRESS_AS_NAME_PROBABILITY = 0.1
DEFAULT_NAME_PROBABILITY = 0.2
NAME_FROM_ADDRESS_PROBABILITY = 0.5
PLAIN_NAME_PROBABILITY = 1.0

TOP_SENDER_COUNT = 20


@dataclass(frozen=True, slots=True)
class SenderCount:
    """Reply statistics for one frequent sender."""

    person: Person
    positive: int
    negative: int

    @property
    def fraction(self) -> float:
        total = self.positive + self.negative
        return 0.0 if total == 0 else self.positive / total


@dataclass(eq=False)
class User:
    """A mailbox owner together with their loaded mail.

    Attributes:
        user_name: Display name used in dataset ids.
        owner_email: Address identifying the owner's own identities.
        feature_cache: Configured feature instances, one per feature type.
        feature_bucket_cache: Computed feature outputs keyed by
            ``(message_id, feature_type)``.
    """

    user_name: str
    owner_email: str | None = None
    messages: dict[str, Message] = field(default_factory=dict)
    conversations: dict[str, Conversation] = field(default_factory=dict)
    people: dict[str, Person] = field(default_factory=dict)
    folders: dict[str, MessageFolder] = field(default_factory=dict)
    feature_cache: dict[FeatureType, Feature] = field(default_factory=dict)
    feature_bucket_cache: dict[tuple[str, FeatureType], list[tuple[FeatureBucket, float]]] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        self.me = Person(person_id=ME_PERSON_ID)
        self.people[ME_PERSON_ID] = self.me
        self.contacts_by_address: dict[str, ContactDetails] = {}
        self.contacts_by_name: dict[str, ContactDetails] = {}
        self._people_by_address: dict[str, Person] = {}
        self._people_by_name: dict[str, Person] = {}
        self._person_ids = itertools.count(1)
        self._train: list[Message] | None = None
        self._validation: list[Message] | None = None
        self._test: list[Message] | None = None

    # Contacts

    def _is_owner_address(self, address: str | None) -> bool:
        return bool(address and self.owner_email and address.lower() == self.owner_email.lower())

    def _contact_by_name(self, name: str | None) -> ContactDetails:
        if not name or not name.strip():
            name = "unknown"
        key = normalize_name(name)
        if key not in self.contacts_by_name:
            self.contacts_by_name[key] = ContactDetails(
                name=Uncertain.from_prob(name, DEFAULT_NAME_PROBABILITY)
            )
        return self.contacts_by_name[key]

    def _contact_by_address(self, name: str | None, address: str) -> ContactDetails:
        key = address.lower()
        if key not in self.contacts_by_address:
            contact = ContactDetails(
                name=Uncertain.from_prob(name, DEFAULT_NAME_PROBABILITY),
                email=Uncertain(address),
                is_me=self._is_owner_address(address),
            )
            self.contacts_by_address[key] = contact
            if name:
                self.contacts_by_name[normalize_name(name)] = contact
        return self.contacts_by_address[key]

    def get_contact_details(self, name: str | None, address: str | None) -> ContactDetails:
        """Find or create the identity for a header name/address pair.

        The identity's name confidence is raised as better evidence arrives:
        an address standing in for a name is weakest, a name cut from an
        address is medium and a plain display name is certain.

        Args:
            name: Display name from the header, possibly empty.
            address: Address from the header, possibly wrapped in ``<>``
                or quotes.

        Returns:
            The shared identity for this name/address.
        """
        if address is not None:
            address = address.strip("<>'\"")

        if address is None or not address.strip():
            contact = self._contact_by_name(name)
        else:
            contact = self._contact_by_address(name, address)

        if not name:
            if address and address.strip():
                contact.name = Uncertain.from_prob(address, ADDRESS_AS_NAME_PROBABILITY)
            return contact

        s = name.strip("<>'\"")
        if address and s.endswith(f"({address})"):
            s = s[: len(s) - (len(address) + 2)].rstrip()

        k = s.find("@")
        if k != -1:
            # Never overwrite a more certain name with one cut from an address
            if contact.name.probability <= NAME_FROM_ADDRESS_PROBABILITY:
                contact.name = Uncertain.from_prob(s[:k].replace(".", " "), NAME_FROM_ADDRESS_PROBABILITY)
        else:
            contact.name = Uncertain.from_prob(s, PLAIN_NAME_PROBABILITY)
        return contact

    def get_contact_list(
        self, names: list[str | None], addresses: list[str | None] | None
    ) -> list[ContactDetails] | None:
        if addresses is None:
            return None
        return [
            self.get_contact_details(names[i] if i < len(names) else None, address)
            for i, address in enumerate(addresses)
        ]

    @property
    def all_contacts(self) -> list[ContactDetails]:
        contacts: list[ContactDetails] = []
        seen: set[int] = set()
        for cd in [*self.contacts_by_address.values(), *self.contacts_by_name.values()]:
            if id(cd) not in seen:
                seen.add(id(cd))
                contacts.append(cd)
        return contacts

    def _register_identity(self, contact: ContactDetails, person: Person) -> None:
        if contact.name.value is not None:
            self._people_by_name[normalize_name(contact.name.value)] = person
        if contact.email.value is not None:
            self._people_by_address[contact.email.value.lower()] = person

    def _new_person(self) -> Person:
        person = Person(person_id=f"person-{next(self._person_ids)}")
        self.people[person.person_id] = person
        return person

    def _get_or_create_person(self, contact: ContactDetails) -> Person:
        if contact.email.value is not None:
            person = self._people_by_address.get(contact.email.value.lower())
            if person is not None:
                return person
        if contact.name.value is not None:
            key = normalize_name(contact.name.value)
            if key not in self._people_by_name:
                self._people_by_name[key] = self._new_person()
            return self._people_by_name[key]
        return self._new_person()

    def merge_contacts(self) -> None:
        """Group identities into people by address, then by normalised name."""
        contacts = self.all_contacts
        for cd in contacts:
            if cd.is_me:
                self._register_identity(cd, self.me)
                self.me.add_identity(cd)

        for cd in contacts:
            if cd.is_me:
                continue
            person = self._get_or_create_person(cd)
            if person is self.me:
                cd.is_me = True
            self._register_identity(cd, person)
            person.add_identity(cd)

        logger.debug("contacts_merged", user=self.user_name, contacts=len(contacts), people=len(self.people))

    def person_of(self, contact: ContactDetails) -> Person:
        """The person owning an identity, creating a singleton if unmerged."""
        if contact.person_id is not None and contact.person_id in self.people:
            return self.people[contact.person_id]
        person = self._new_person()
        person.add_identity(contact)
        return person

    # Folders, conversations and messages

    def get_or_create_folder(self, name: str | None) -> MessageFolder:
        key = (name or "").lower()
        if key not in self.folders:
            self.folders[key] = MessageFolder(name=name, folder_id=key)
        return self.folders[key]

    def get_or_create_conversation(self, conversation_id: str | None) -> Conversation:
        if conversation_id is None:
            conversation_id = uuid.uuid4().hex
        if conversation_id not in self.conversations:
            self.conversations[conversation_id] = Conversation(conversation_id=conversation_id)
        return self.conversations[conversation_id]

    def add_message(self, message: Message) -> None:
        """Register a message and file it into its conversation and folder."""
        if message.message_id in self.messages:
            raise ContractViolationError(f"Duplicate message id {message.message_id!r}")
        self.messages[message.message_id] = message
        self.get_or_create_conversation(message.conversation_id).add_message(message)
        if message.folder is not None:
            message.folder.add_message(message)
        for cd in message.participating_contacts:
            cd.message_count += 1

    def rebuild_conversations(self) -> None:
        for conversation in self.conversations.values():
            conversation.rebuild()

    def conversation_of(self, message: Message) -> Conversation | None:
        if message.conversation_id is None:
            return None
        return self.conversations.get(message.conversation_id)

    def is_replied_to(self, message: Message) -> bool:
        """Whether the owner replied to ``message``."""
        conversation = self.conversation_of(message)
        if conversation is None:
            return bool(message.last_verb_executed_indicates_reply)
        return conversation.is_message_replied_to(message)

    def primary_action(self, message: Message) -> PrimaryAction:
        return message.primary_action(self.is_replied_to(message))

    def folder_reply_fraction(self, folder: MessageFolder) -> float:
        return folder.reply_fraction(self.is_replied_to)

    @property
    def most_recent_message_time(self) -> datetime | None:
        return max((m.date_sent for m in self.messages.values()), default=None)

    # Partitions

    def set_partitions(self, train: list[Message], validation: list[Message], test: list[Message]) -> None:
        for m in self.messages.values():
            m.is_training = m.is_validation = m.is_test = False
        for m in train:
            m.is_training = True
        for m in validation:
            m.is_validation = True
        for m in test:
            m.is_test = True
        self._train, self._validation, self._test = list(train), list(validation), list(test)

    @property
    def has_partitions(self) -> bool:
        return self._train is not None

    def _partition(self, part: list[Message] | None, name: str) -> list[Message]:
        if part is None:
            raise ContractViolationError(f"{name} messages requested before the user's messages were split")
        return part

    @property
    def train_messages(self) -> list[Message]:
        return self._partition(self._train, "Training")

    @property
    def validation_messages(self) -> list[Message]:
        return self._partition(self._validation, "Validation")

    @property
    def test_messages(self) -> list[Message]:
        return self._partition(self._test, "Test")

    @property
    def train_and_validation_messages(self) -> list[Message]:
        return self.train_messages + self.validation_messages

    @property
    def all_messages(self) -> list[Message]:
        """All partitioned messages, newest first."""
        messages = self.train_and_validation_messages + self.test_messages
        return sorted(messages, key=lambda m: m.date_sent, reverse=True)

    @property
    def train_contacts(self) -> list[Person]:
        """People other than the owner who sent or started a training message."""
        people: list[Person] = []
        for m in self.train_messages:
            conversation = self.conversation_of(m)
            starter = conversation.from_ if conversation is not None else None
            for cd in (m.sender, starter):
                if cd is None:
                    continue
                person = self.person_of(cd)
                if not person.is_me and person not in people:
                    people.append(person)
        return people

    @property
    def train_identities(self) -> list[ContactDetails]:
        identities: list[ContactDetails] = []
        for m in self.train_messages:
            cd = m.received_as
            if cd is not None and cd.is_me and cd not in identities:
                identities.append(cd)
        return identities

    def top_senders(self) -> list[tuple[Person, list[Message]]]:
        """Training and validation messages grouped by sender, busiest first."""
        groups: dict[str, list[Message]] = {}
        for m in self.train_and_validation_messages:
            if m.sender is None:
                continue
            groups.setdefault(self.person_of(m.sender).person_id, []).append(m)
        tally = TallyCounter({pid: len(msgs) for pid, msgs in groups.items()})
        return [
            (self.people[pid], groups[pid])
            for pid, _ in tally.most_common()
            if not self.people[pid].is_me
        ]

    def top_sender_counts(self, n: int = TOP_SENDER_COUNT) -> list[SenderCount]:
        counts = []
        for person, messages in self.top_senders()[:n]:
            positive = sum(1 for m in messages if self.is_replied_to(m))
            counts.append(SenderCount(person=person, positive=positive, negative=len(messages) - positive))
        return counts

    def top_sender_fractions(self) -> dict[str, float]:
        return {f"{c.person.name} ({c.positive + c.negative})": c.fraction for c in self.top_sender_counts()}

    def __str__(self) -> str:
        return self.user_name

    def __repr__(self) -> str:
        return f"User({self.user_name!r}, messages={len(self.messages)})"
