"""Date-windowed train/validation/test partitioning of a user's messages."""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta

import numpy as np
import structlog

from inbox_reply.core.config import MAX_MONTHS, Config
from inbox_reply.models.message import Message
from inbox_reply.models.user import User

logger = structlog.get_logger(__name__)

# Folders the owner replies from less often than this are not worth learning from
MIN_FOLDER_REPLY_FRACTION = 0.01


def subtract_months(when: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` earlier, clamped to the month's last day."""
    index = when.year * 12 + when.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    day = min(when.day, calendar.monthrange(year, month)[1])
    return when.replace(year=year, month=month, day=day)


def partition_sizes(total: int, train: int, validation: int, test: int) -> tuple[int, int, int]:
    """Scale requested partition sizes to the number of usable messages.

    With plenty of data every partition grows in proportion. When there is
    enough for training and validation but not for all three, training keeps
    its size and the rest is shared between validation and test. Below that,
    everything shrinks in proportion.
    """
    desired = train + validation + test
    if desired == 0:
        return 0, 0, 0
    if total < desired and total >= train + validation:
        share = validation / (validation + test) if validation + test else 0.0
        validation = int((total - train) * share)
    else:
        train, validation = int(total * train / desired), int(total * validation / desired)
    return train, validation, total - train - validation


def split_user_messages(user: User, config: Config, now: datetime | None = None) -> list[str]:
    """Partition a threaded user's messages into train, validation and test.

    Only messages whose reply status is settled are used: those older than
    the ground-truth cutoff, outside sent items and conversation history,
    and in folders the owner sometimes replies from. Whole conversations go
    to one partition, visited in a seeded random order.

    Args:
        user: User whose conversations have been rebuilt.
        config: Partition sizes, history window and shuffle seed.
        now: Reference time for the month window; defaults to the current time.

    Returns:
        Problems found, one per empty partition.
    """
    latest = user.most_recent_message_time
    if latest is None:
        user.set_partitions([], [], [])
        errors = ["No messages found!"]
        logger.warning("split_failed", user=user.user_name, errors=errors)
        return errors

    cutoff = latest - timedelta(days=config.ground_truth_days)
    oldest: datetime | None = None
    if config.months > 0:
        oldest = subtract_months(now or datetime.now(tz=latest.tzinfo), min(config.months, MAX_MONTHS))

    def usable(m: Message) -> bool:
        folder = m.folder
        if folder is not None and (
            folder.is_sent_items
            or folder.is_conversation_history
            or user.folder_reply_fraction(folder) < MIN_FOLDER_REPLY_FRACTION
        ):
            return False
        return m.date_sent < cutoff and (oldest is None or m.date_sent > oldest)

    total = sum(1 for m in user.messages.values() if usable(m))
    n_train, n_validation, n_test = partition_sizes(
        total, config.train_size, config.validation_size, config.test_size
    )

    train: list[Message] = []
    validation: list[Message] = []
    test: list[Message] = []
    conversations = list(user.conversations.values())
    order = np.random.default_rng(config.random_seed).permutation(len(conversations))
    for i in order:
        messages = [m for m in conversations[i].messages if usable(m)]
        if len(train) < n_train:
            train.extend(messages)
        elif len(validation) < n_validation:
            validation.extend(messages)
        elif len(test) < n_test:
            test.extend(messages)
    user.set_partitions(train, validation, test)

    errors = []
    if not train:
        errors.append("No training messages found!")
    if not validation:
        errors.append("No validation messages found!")
    if not test:
        errors.append("No test messages found!")

    logger.info(
        "messages_split",
        user=user.user_name,
        usable=total,
        train=len(train),
        validation=len(validation),
        test=len(test),
        errors=errors,
    )
    return errors
