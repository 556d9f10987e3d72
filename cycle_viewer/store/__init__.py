from .dataset_store import BatchResult, DatasetStore, StoreStatus, collation_key, set_collation_locale

__all__ = [
    "BatchResult",
    "DatasetStore",
    "StoreStatus",
    "collation_key",
    "set_collation_locale",
]
