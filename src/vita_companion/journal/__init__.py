"""
Meal / exercise journal.

Components:
- journal_models.py: data structures (Meal, Exercise)
- journal_store.py: SQLite-backed storage
- journal_format.py: history rendering grouped by date
"""
