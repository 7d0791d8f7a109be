"""Clients for the out-of-process AI microservices."""

from agritech.services.ai.ai_service_client import AIServiceClient

__all__ = ["AIServiceClient"]
