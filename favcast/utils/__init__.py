"""Shared helpers: retry, chunking, dates, logging."""
