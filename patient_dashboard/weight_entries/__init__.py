"""
Weight Entries Package

Per-user body weight measurements and their period summary.
"""
