"""
JobSeek Anonymous Data Migration

Moves the data an anonymous visitor accumulated in browser-local storage into
their authenticated account once they sign in.

Supports:
- Collecting saved jobs, searches, applications, boards, board preferences,
  search results and the profile from the local anonymous store
- Previewing what would be migrated
- Migrating through the HTTP migration endpoint or an in-process writer
- Tracking migration status per browser session
- A single-table DynamoDB persistence layer for the server side
"""

__version__ = "0.1.0"
