# Blue Avocado Test Suite
"""
Test suite including:
- Known-answer tests for each primitive
- Round-trip tests
- Security tests (invalid inputs, spent stream state)
- Integration tests (registry, command line)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
