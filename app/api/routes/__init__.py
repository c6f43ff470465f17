"""
API routes.

- sync: preview and commit game syncs, find games by team and date
- environments: list environments, test connections, stats, reset
"""
