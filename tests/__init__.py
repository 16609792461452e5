#!/usr/bin/env python3
"""
Test suite for the Clarus Index scoring engine.

    # Run all tests
    python -m pytest tests/ -v

No external services are needed; the score history tests write to a
temporary directory. Shared rubrics and clocks live in
tests/fixtures/rubric_fixtures.py.
"""
