"""
Common Components for the patient dashboard backend

This package contains infrastructure shared by every resource module:
logging, the error taxonomy, authentication and authorization, database
access conventions, pagination and rate limiting.
"""

from patient_dashboard.common.logger import app_logger

__all__ = [
    'app_logger',
]
