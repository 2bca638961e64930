"""
Medications Package

Per-user medication records with dosage, frequency and active period.
"""
