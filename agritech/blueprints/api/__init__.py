"""JSON API blueprints, registered under the configured API prefix."""
