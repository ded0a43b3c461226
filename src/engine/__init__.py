"""Realtime reasoning engine adapters."""
