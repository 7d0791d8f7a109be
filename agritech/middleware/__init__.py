"""Request/response middleware registered by the application factory."""
