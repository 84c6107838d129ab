"""Threadline: threads, replies and communities backed by SQLAlchemy."""
