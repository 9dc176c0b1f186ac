"""Marketplace notifications service package.

Holds the backend store client, the notification dispatch, read tracking and
realtime bridge use cases, and the FastAPI interface built on top of them.
"""
