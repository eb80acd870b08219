"""
Test Suite for Pipeline Dispatcher.

Test organization:
    - unit/: Unit tests for individual components
    - integration/: End-to-end dispatcher tests
    - performance/: Throughput benchmarks
    - fixtures/: Shared sample configuration

Running Tests:
    pytest tests/                           # All tests
    pytest tests/unit/                      # Unit tests only
    pytest -m "not slow"                    # Skip benchmarks
"""
