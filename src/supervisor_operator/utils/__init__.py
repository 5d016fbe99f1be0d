"""
Utilities package - helpers shared by handlers and services.
"""
