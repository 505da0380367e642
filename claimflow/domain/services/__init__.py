"""
Domain services for the claim management system.
"""

from .denial_analysis import DenialAnalysisService

__all__ = [
    "DenialAnalysisService",
]
