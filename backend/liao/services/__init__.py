"""Domain services: scoring rules and the score store.

Imported by HTTP routes and CLI commands, keeping transport concerns
separated from the point economy.
"""
