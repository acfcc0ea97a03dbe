"""Services that load a mailbox and partition it for training."""

from inbox_reply.services.ingest import ingest_records, load_records
from inbox_reply.services.splitting import partition_sizes, split_user_messages, subtract_months

__all__ = [
    "ingest_records",
    "load_records",
    "partition_sizes",
    "split_user_messages",
    "subtract_months",
]
