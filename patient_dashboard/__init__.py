"""
Patient Dashboard Backend

REST API behind the patient dashboard. It provides:
1. Registration, login and token refresh with bcrypt-hashed passwords and JWTs
2. Role and ownership checks on every protected resource
3. Weight tracking with a period summary
4. Medication and shipment records scoped to their owner
"""

__version__ = "1.0.0"
