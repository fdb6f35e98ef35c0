"""
Test suite for Fleet Reports.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_target_metrics.py -v
"""
