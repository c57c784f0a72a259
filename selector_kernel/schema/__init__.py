"""Schema metadata for selectors: field references and entity describes."""

from selector_kernel.schema.describe import AccessPolicy, EntityDescribe, SchemaDescribe
from selector_kernel.schema.fields import FieldIdentifier, FieldSetDescriptor

__all__ = [
    "AccessPolicy",
    "EntityDescribe",
    "FieldIdentifier",
    "FieldSetDescriptor",
    "SchemaDescribe",
]
