"""
Academy Analytics - Services Module

Business logic layer.
"""

from app.services import analytics_repository
from app.services import enrollment_join
from app.services import kpi_service
from app.services import analytics_service

__all__ = [
    "analytics_repository",
    "enrollment_join",
    "kpi_service",
    "analytics_service",
]
