"""Request orchestration for diagnosis, soil analysis and the assistant."""
