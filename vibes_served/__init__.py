"""Vibes Only Served: greeting/probe API plus JSON idea seeding."""

__version__ = "0.1.0"
