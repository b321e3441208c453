from kojo.persistence.stores import InMemoryStore, JsonFileStore, LeaderboardStore, default_data_dir
from kojo.persistence.worker import PersistenceWorker

__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "LeaderboardStore",
    "PersistenceWorker",
    "default_data_dir",
]
