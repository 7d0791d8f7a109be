"""Small shared helpers (HTTP envelopes, time)."""
