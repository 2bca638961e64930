"""
Database Module

This module provides the declarative base and metadata shared by every
patient dashboard model.
"""

from patient_dashboard.database.base import Base, ModelBase, metadata

__all__ = ['Base', 'ModelBase', 'metadata']
