"""Shared utilities for trackerdash."""
