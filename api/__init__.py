"""
FastAPI RESTful API for the bookstore review service.

This module provides:
- Book catalog browsing and lookup by ISBN, author and title
- User registration and login
- Token-protected review add/modify/delete
"""
