"""
WordSmith core package.

Modules
───────
models         — Pydantic data models (Collocation, Notification, Severity)
errors         — EmptyWordError, ServiceError, StorageError
notifications  — toast queue: pure reducer + timed removal
history        — SQLite key-value slot holding the recent search words
collocations   — Claude structured-output call: word → collocations
lookup         — LookupSession: page state and the search action
"""
