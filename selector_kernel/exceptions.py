"""
Typed Exception Hierarchy for the Selector Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from SelectorKernelError:

    SelectorKernelError (base)
    |
    +-- SchemaError
    |   +-- UnknownEntityTypeError
    |   +-- UnknownFieldError
    |   +-- UnknownFieldSetError
    |
    +-- AccessError
    |   +-- AccessDeniedError
    |
    +-- SelectorError
        +-- SelectorNotRegisteredError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Schema          | UNKNOWN_ENTITY_TYPE         | Class is not a mapped entity type
                | UNKNOWN_FIELD               | Field name not on the entity
                | UNKNOWN_FIELD_SET           | Field set not registered for the entity
----------------|-----------------------------|-----------------------------------------
Access          | ACCESS_DENIED               | Caller may not read the entity type
----------------|-----------------------------|-----------------------------------------
Selector        | SELECTOR_NOT_REGISTERED     | No selector class for the entity type

Record-store failures (malformed ORDER BY, connection faults, ...) are raised
by SQLAlchemy and are NOT wrapped here: they reach the caller unchanged.

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        rows = selector.select_by_ids(ids)
    except AccessDeniedError as e:
        return api_response(code=e.code, entity=e.entity_name)

Nothing in the kernel catches AccessDeniedError: a denied read never reaches
the record store.
"""


class SelectorKernelError(Exception):
    """
    Base exception for all selector kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SELECTOR_KERNEL_ERROR"


# Schema / metadata exceptions


class SchemaError(SelectorKernelError):
    """Base exception for schema and metadata lookup errors."""

    code: str = "SCHEMA_ERROR"


class UnknownEntityTypeError(SchemaError):
    """The given object is not a mapped entity type."""

    code: str = "UNKNOWN_ENTITY_TYPE"

    def __init__(self, entity_type: object):
        self.entity_type = getattr(entity_type, "__name__", repr(entity_type))
        super().__init__(f"Not a mapped entity type: {self.entity_type}")


class UnknownFieldError(SchemaError):
    """Field reference does not resolve to a column of the entity."""

    code: str = "UNKNOWN_FIELD"

    def __init__(self, field_ref: object, entity_name: str | None = None):
        self.field_ref = str(field_ref)
        self.entity_name = entity_name
        where = f" on {entity_name}" if entity_name else ""
        super().__init__(f"Unknown field{where}: {self.field_ref}")


class UnknownFieldSetError(SchemaError):
    """Field set is not registered for the entity."""

    code: str = "UNKNOWN_FIELD_SET"

    def __init__(self, field_set_name: str, entity_name: str):
        self.field_set_name = field_set_name
        self.entity_name = entity_name
        super().__init__(
            f"Unknown field set on {entity_name}: {field_set_name}"
        )


# Access exceptions


class AccessError(SelectorKernelError):
    """Base exception for access-control failures."""

    code: str = "ACCESS_ERROR"


class AccessDeniedError(AccessError):
    """
    Current caller lacks read permission on the entity type.

    Raised before any query reaches the record store.
    """

    code: str = "ACCESS_DENIED"

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(f"Permission to read {entity_name} denied")


# Selector exceptions


class SelectorError(SelectorKernelError):
    """Base exception for selector wiring errors."""

    code: str = "SELECTOR_ERROR"


class SelectorNotRegisteredError(SelectorError):
    """No selector class registered for the entity type."""

    code: str = "SELECTOR_NOT_REGISTERED"

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(f"No selector registered for entity type: {entity_name}")
