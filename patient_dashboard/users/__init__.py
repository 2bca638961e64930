"""
Users Package

Identity storage and the authentication endpoints (register, login,
refresh, logout, profile).
"""
