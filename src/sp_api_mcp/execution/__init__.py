"""Upstream HTTP execution."""
