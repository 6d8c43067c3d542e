# orders/__init__.py
"""
Order receiver core package.

Provides:
- Domain enums, models and errors for webhook orders
- Thread-safe in-memory OrderStore
- Broadcaster fanning events out to live stream subscribers
- Services for ingestion, status updates and per-connection stream sessions
"""
