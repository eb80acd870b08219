"""
Performance Tests.

Benchmarks for dispatcher throughput:
    - 2000 invocations of a three-step pipeline < 5 seconds
    - Expression cache hits cheaper than parsing
"""
