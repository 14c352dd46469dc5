"""Helpers for building RealtimeConfig from the environment."""
