"""SQLite persistence: connection handler, pagination and repositories."""
