"""
Shared helpers: console output and logging setup.
"""
