"""
Shipments Package

Per-user medication shipments with their items and delivery status.
"""
