"""Utilities module.

This module provides shared exceptions and error reporting helpers.
"""
