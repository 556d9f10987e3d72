from .series import Dataset, ParsedFile, Section, Series
from .store_entry import StoreEntry

__all__ = [
    "Dataset",
    "ParsedFile",
    "Section",
    "Series",
    "StoreEntry",
]
