"""Tracker sync components.

- Settings loaded from the environment / .env
- Structured logging
- Issue selection from the source repository
- Tracker issue reconciliation on the target repository
"""
