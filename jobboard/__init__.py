"""
Job Board Backend
Job seekers and employers: accounts, profiles, job postings,
applications, real-time messaging and a community feed.

Architecture:
- SQL database (PostgreSQL, SQLite in tests): login accounts
- MongoDB: profiles, jobs, applications, conversations, messages, posts
- In-process listener hub + WebSockets: live snapshots
"""

__version__ = "1.0.0"
