"""
Tests package - test suite for the supervisor operator.

Contains:
- unit/: Unit tests for individual components
- fixtures/: OIDCProvider and key secret test data
"""
