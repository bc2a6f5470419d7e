"""
User records and the cached user directory.
"""
