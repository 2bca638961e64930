"""
Middleware Package

This package contains HTTP middleware components for the patient dashboard API.
"""

from patient_dashboard.middleware.request_logging import RequestLoggingMiddleware

__all__ = ['RequestLoggingMiddleware']
