"""Per-user features with one bucket per known person.

Buckets are seeded by ``configure_for(user)`` from the people in the
user's training messages and extended on the fly when an unseen person
turns up, so the bucket list of these features grows over time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from inbox_reply.features.base import (
    ConfigurableFeature,
    Feature,
    FeatureBucket,
    FeatureOutput,
    FeatureType,
    MofNFeature,
    OneOfNFeature,
)
from inbox_reply.models.contacts import Person, unknown_person

if TYPE_CHECKING:
    from inbox_reply.models.message import Message
    from inbox_reply.models.user import User

logger = structlog.get_logger(__name__)

CC_SUFFIX = "(Cc)"

BucketTable = dict[str, FeatureBucket]


def bucket_for_person(person: Person, table: BucketTable) -> FeatureBucket | None:
    """Look a person up by best name, then by each of their addresses."""
    if person.best_name.value is not None and person.best_name.value in table:
        return table[person.best_name.value]
    for email in person.emails:
        if email.value is not None and email.value in table:
            return table[email.value]
    return None


def create_bucket(
    feature: Feature, person: Person, table: BucketTable, suffix: str = ""
) -> FeatureBucket:
    """Append a bucket for ``person`` and index it by name and addresses."""
    bucket = feature._make_bucket(len(feature.buckets), f"{person.name}{suffix}")
    feature.buckets.append(bucket)
    if person.name.value is not None:
        table[person.name.value] = bucket
    for email in person.emails:
        if email.value is not None and email.value not in table:
            table[email.value] = bucket
    return bucket


class _PersonFeature(ConfigurableFeature):
    is_shared = False

    def _seed_people(self, user: User) -> list[Person]:
        return [self._unknown, user.me, *user.train_contacts]

    def _person_of_sender(self, user: User, message: Message) -> Person:
        return self._unknown if message.sender is None else user.person_of(message.sender)

    def _finish_configuration(self, user: User) -> None:
        self._configured_user = user.user_name
        logger.info(
            "feature_configured",
            feature=self.feature_type.value,
            user=user.user_name,
            buckets=len(self.buckets),
        )


class Sender(_PersonFeature, OneOfNFeature):
    """Who the message is from."""

    feature_type = FeatureType.SENDER
    description = "Who the message is from"

    def __init__(self) -> None:
        super().__init__()
        self._unknown = unknown_person()
        self._table: BucketTable = {}

    def configure_for(self, user: User) -> None:
        self.configure()
        for person in self._seed_people(user):
            if bucket_for_person(person, self._table) is None:
                create_bucket(self, person, self._table)
        self._finish_configuration(user)

    def compute(self, user: User, message: Message) -> FeatureOutput:
        self._require_user(user)
        return super().compute(user, message)

    def compute_feature(self, user: User, message: Message) -> FeatureBucket:
        person = self._person_of_sender(user, message)
        return bucket_for_person(person, self._table) or create_bucket(self, person, self._table)


class SenderToCc(_PersonFeature, OneOfNFeature):
    """Who the message is from, split by whether you were on the To or Cc line."""

    feature_type = FeatureType.SENDER_TO_CC
    description = "Who the message is from (To or Cc)"

    def __init__(self) -> None:
        super().__init__()
        self._unknown = unknown_person()
        self._to_table: BucketTable = {}
        self._cc_table: BucketTable = {}

    def configure_for(self, user: User) -> None:
        self.configure()
        for person in self._seed_people(user):
            if bucket_for_person(person, self._to_table) is None:
                create_bucket(self, person, self._to_table)
            if bucket_for_person(person, self._cc_table) is None:
                create_bucket(self, person, self._cc_table, CC_SUFFIX)
        self._finish_configuration(user)

    def compute(self, user: User, message: Message) -> FeatureOutput:
        self._require_user(user)
        return super().compute(user, message)

    def compute_feature(self, user: User, message: Message) -> FeatureBucket:
        person = self._person_of_sender(user, message)
        if message.to_line:
            return bucket_for_person(person, self._to_table) or create_bucket(self, person, self._to_table)
        return bucket_for_person(person, self._cc_table) or create_bucket(
            self, person, self._cc_table, CC_SUFFIX
        )


class Recipient(_PersonFeature, MofNFeature):
    """Who the message is to; each of the k recipients is valued 1/k."""

    feature_type = FeatureType.RECIPIENT
    description = "Who the message is to"

    def __init__(self) -> None:
        super().__init__()
        self._unknown = unknown_person()
        self._table: BucketTable = {}

    def configure_for(self, user: User) -> None:
        self.configure()
        for person in self._seed_people(user):
            if bucket_for_person(person, self._table) is None:
                create_bucket(self, person, self._table)
        self._finish_configuration(user)

    def compute_feature(self, user: User, message: Message) -> FeatureOutput:
        people: list[Person] = []
        for cd in [*(message.sent_to or []), *(message.copied_to or [])]:
            person = user.person_of(cd)
            if person not in people:
                people.append(person)
        if not people:
            return []
        buckets = [bucket_for_person(p, self._table) or create_bucket(self, p, self._table) for p in people]
        return [(b, 1.0 / len(buckets)) for b in buckets]
