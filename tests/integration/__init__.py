"""
Integration Tests - End-to-End Dispatch Tests.

These tests verify that resolution, authorization and execution work
together through the public Dispatcher entry points.

Test Files:
    - test_dispatcher.py: Full invocation workflow
"""
