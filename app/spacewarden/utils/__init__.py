"""Utility helpers for shell execution and console output."""
