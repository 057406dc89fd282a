from .store_adapter import SqlAlchemyStoreAdapter
from .notifier_adapter import LogNotifierAdapter

__all__ = [
    "SqlAlchemyStoreAdapter",
    "LogNotifierAdapter",
]
