"""IO subpackage: session persistence."""
from .session_store import InMemorySessionStore, JSONFileSessionStore, SessionRecord, SessionStore
