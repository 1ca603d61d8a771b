"""
To-do subsystem.

Components:
- todo_models.py: data structures (Task)
- todo_store.py: SQLite-backed storage (list/create/toggle/delete)
- todo_aggregator.py: pure partitioning of tasks into display buckets
- todo_formatter.py: pure rendering of the buckets + /done_N id parsing
"""
