"""Utility modules for the model catalog core."""

from .crud_helpers import (
    create_record,
    delete_record,
    get_record,
    get_record_by_id,
    list_records,
    update_record,
)
from .encryption_utils import Cipher, get_cipher, set_cipher
from .json_utils import dumps, loads
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    OwnerContextFilter,
    configure_logging,
    get_logger,
)

__all__ = [
    "AzureQueueHandler",
    "Cipher",
    "ContextAwareLogger",
    "OwnerContextFilter",
    "configure_logging",
    "create_record",
    "delete_record",
    "dumps",
    "get_cipher",
    "get_logger",
    "get_record",
    "get_record_by_id",
    "list_records",
    "loads",
    "set_cipher",
    "update_record",
]
