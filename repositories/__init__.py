"""
Stagebot Team Learning - Repository Layer

Data access layer for Supabase operations:
- FeedbackRepository: append-only feedback event store
"""

from repositories.feedback import FeedbackRepository, StoreError

__all__ = [
    "FeedbackRepository",
    "StoreError",
]
