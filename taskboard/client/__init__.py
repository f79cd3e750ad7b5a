from taskboard.client.api import TaskApiClient
from taskboard.client.preferences import Preferences
from taskboard.client.store import TaskStore
from taskboard.client.users import UserDirectory

__all__ = ["TaskApiClient", "Preferences", "TaskStore", "UserDirectory"]
