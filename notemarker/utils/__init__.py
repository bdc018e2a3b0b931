"""Logging, constants and exceptions."""
