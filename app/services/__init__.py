"""
Services module.

This module organizes services into:
- store: Document store interface and backends (memory, sql)
- sync: Dependency resolver, sync orchestrator and game lookup
- sample_data: Sample data set used to seed environments
"""
