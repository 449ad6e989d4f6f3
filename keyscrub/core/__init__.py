# keyscrub/core/__init__.py

"""Core domain models and utilities used across keyscrub.

This package provides the key table types, exceptions, and the indicator
configuration loader shared by the rest of the application.
"""
