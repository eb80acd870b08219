"""
Domain Package - Core Entities and Error Taxonomy.

Components:
    - RouteKey, Step, Pipeline: immutable route and pipeline definitions
    - Claims: caller identity handed over by transport adapters
    - Failure, InvocationResult: outcome of one invocation
    - errors: DispatchError hierarchy and ErrorKind discriminator
"""
