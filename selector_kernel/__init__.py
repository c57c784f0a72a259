"""
Selector Kernel

Read-side query building for schema-described record stores:
- Declarative field lists with field-set expansion
- Policy-driven field injection (e.g. currency code)
- Read-access enforcement before every query
- Identifier-scoped, parameter-bound query execution
"""

__version__ = "0.1.0"
