"""Prompt files shipped with the service."""
