"""
Data pipeline package for storing raw market ticks in a local SQLite
database and reading them back for the analytics engine.

Modules:
- db: DB initialization, append and full-read helpers
- ingest: Clean scraped quote payloads and exported tables into store rows
- data_service: Facade used by app code to read and append ticks
"""
