"""Repositories over the SQLite handler.

    from infrastructure.database.repositories import DiagnosisRepository
"""

from infrastructure.database.repositories.diagnoses import DiagnosisRepository

__all__ = ["DiagnosisRepository"]
