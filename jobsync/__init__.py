"""Incremental crawler for paginated job listings."""
