"""Credential extraction from pasted curl commands and session tokens."""
