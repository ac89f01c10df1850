"""Utility helpers for sacred-wiki."""
