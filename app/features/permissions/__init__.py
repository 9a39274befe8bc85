"""
Permission management feature module.

Implements Role-Based Access Control (RBAC) through a static policy matrix,
a cached principal -> role resolver and an authorization gate.
"""
