#!/usr/bin/env python3
"""
Test suite for the match engine.

All tests run without external services: database tests use an in-memory
SQLite database (see conftest.py) and Redis is mocked.

    # Run all tests
    python -m pytest tests/ -v

    # Skip database-backed tests
    python -m pytest tests/ -v -m "not db"
"""
