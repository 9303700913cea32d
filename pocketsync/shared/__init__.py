"""
PocketSync – Shared Module
============================
Utilidades transversales usadas por todas las capas:
- config/: Settings (pydantic-settings)
- logging/: setup_logging / get_logger
"""
