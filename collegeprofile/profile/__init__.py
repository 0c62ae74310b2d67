"""Profile document, merge helpers, storage and service."""

from .schemas import Profile, new_profile
from .storage import InMemoryProfileStore, JsonFileProfileStore, ProfileStore

__all__ = ["InMemoryProfileStore", "JsonFileProfileStore", "Profile", "ProfileStore", "new_profile"]
