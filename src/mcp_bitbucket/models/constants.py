"""Placeholder values shared by the Bitbucket models."""

EMPTY_STRING = ""
UNKNOWN = "Unknown"
UNKNOWN_USER = "Unknown User"
NOT_AVAILABLE = "N/A"
