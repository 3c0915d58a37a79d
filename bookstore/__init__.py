"""
Bookstore package: catalog, credentials and review management.

This package contains:
- MongoDB connection management
- Book catalog lookups
- User credential storage
- Review upsert/delete with the one-review-per-user rule
"""

__version__ = "1.0.0"
