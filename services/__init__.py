"""
Stagebot Team Learning - Services Layer

Business logic layer for platform operations:
- FeedbackService: feedback submission, learned patterns and statistics
- StandardsService: three-layer rule configuration cascade
- StandardsRegistry: hosted, versioned central standards document
- PrCheckEvaluator: PR-level checks of the effective configuration
"""

from services.feedback import FeedbackService
from services.pr_checks import PrCheckEvaluator
from services.standards import StandardsService
from services.standards_registry import StandardsRegistry

__all__ = [
    "FeedbackService",
    "PrCheckEvaluator",
    "StandardsRegistry",
    "StandardsService",
]
