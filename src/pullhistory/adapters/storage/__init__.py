"""Storage adapters implementing HistoryStoragePort."""

from pullhistory.adapters.storage.csv_file import CSVHistoryStorage
from pullhistory.adapters.storage.in_memory import InMemoryHistoryStorage

__all__ = [
    "CSVHistoryStorage",
    "InMemoryHistoryStorage",
]
