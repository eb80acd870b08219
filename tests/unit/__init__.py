"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation with mocked or recording units.
Unit tests should be fast, deterministic, and focused.

Test Files:
    - test_expression_parser.py / test_expression_evaluator.py: Expression language
    - test_authorization_gate.py: Deny-by-default gate
    - test_step_executor.py: Step sequencing and failure conversion
    - test_config_loader.py: Configuration loading/validation
"""
