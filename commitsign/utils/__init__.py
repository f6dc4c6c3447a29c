"""Utility helpers for commitsign."""
