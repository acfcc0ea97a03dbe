"""Tests for inbox_reply.dataset.instance."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from inbox_reply.dataset.instance import Instance
from inbox_reply.features.feature_set import FeatureSet, FeatureSetType

if TYPE_CHECKING:
    from inbox_reply.models.contacts import ContactDetails
    from tests.unit.conftest import MailboxBuilder


@pytest.fixture
def feature_set() -> FeatureSet:
    return FeatureSet.create(FeatureSetType.SEPARATE)


class TestFromMessage:
    """Tests for featurizing a message."""

    def test_label_and_values(self, mailbox: MailboxBuilder, alice: ContactDetails, feature_set: FeatureSet) -> None:
        question = mailbox.message("m1", alice, [mailbox.me])
        mailbox.message("m2", mailbox.me, [alice], minutes=5)
        user = mailbox.build()

        instance = Instance.from_message(question, user, feature_set)

        assert instance.label is True
        assert {str(b): v for b, v in instance.feature_values.items()} == {"ToLine": 1.0, "FromManager": 0.0}
        assert instance.feature_set is feature_set

    def test_unreplied(self, mailbox: MailboxBuilder, alice: ContactDetails, feature_set: FeatureSet) -> None:
        m = mailbox.message("m1", alice, [mailbox.me])
        user = mailbox.build()

        assert Instance.from_message(m, user, feature_set).label is False

    def test_label_probabilities(self, feature_set: FeatureSet) -> None:
        positive = Instance(feature_set, label=True)
        negative = Instance(feature_set, label=False)

        assert positive.probability_label_true == pytest.approx(0.99)
        assert positive.probability_label_false == pytest.approx(0.01)
        assert negative.probability_label_true == pytest.approx(0.01)


class TestEquality:
    """Tests for tolerance-based instance equality."""

    def test_tiny_difference_is_not_equal(self, feature_set: FeatureSet) -> None:
        bucket = feature_set.feature_buckets[0]
        a = Instance(feature_set, {bucket: 0.5})
        b = Instance(feature_set, {bucket: 0.5 + 1e-10})

        assert a != b

    def test_identical_values_equal(self, feature_set: FeatureSet) -> None:
        bucket = feature_set.feature_buckets[0]
        a = Instance(feature_set, {bucket: 0.5}, label=True)
        b = Instance(feature_set, {bucket: 0.5}, label=True)

        assert a == b
        assert hash(a) == hash(b)

    def test_label_matters(self, feature_set: FeatureSet) -> None:
        bucket = feature_set.feature_buckets[0]
        assert Instance(feature_set, {bucket: 1.0}, label=True) != Instance(feature_set, {bucket: 1.0})

    def test_active_buckets_matter(self, feature_set: FeatureSet) -> None:
        first, second = feature_set.feature_buckets
        assert Instance(feature_set, {first: 1.0}) != Instance(feature_set, {second: 1.0})

    def test_feature_set_matters(self, feature_set: FeatureSet) -> None:
        other = FeatureSet.create(FeatureSetType.SINGLE)
        bucket = other.feature_buckets[0]

        assert Instance(feature_set, {bucket: 1.0}) != Instance(other, {bucket: 1.0})
