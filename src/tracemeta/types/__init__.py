"""
tracemeta.types - Field type model

Flat field descriptors in both wire encodings, and the tree they decode into.
"""

from tracemeta.types.descriptors import (
    AType,
    StringEncoding,
    TypeDescriptor,
    IntegerType,
    FloatType,
    StringType,
    EnumType,
    ArrayType,
    SequenceType,
    VariantType,
    StructType,
    EnumNestableType,
    ArrayNestableType,
    SequenceNestableType,
    VariantNestableType,
    StructNestableType,
    OpaqueType,
    FieldDescriptor,
)
from tracemeta.types.tree import (
    FieldKind,
    DescriptorForm,
    FieldNode,
    IntegerField,
    FloatField,
    StringField,
    StructField,
    ArrayField,
    SequenceField,
    EnumField,
    VariantField,
    FieldListReader,
    iter_field_tree,
    decode_fields,
)

__all__ = [
    # Descriptors
    "AType",
    "StringEncoding",
    "TypeDescriptor",
    "IntegerType",
    "FloatType",
    "StringType",
    "EnumType",
    "ArrayType",
    "SequenceType",
    "VariantType",
    "StructType",
    "EnumNestableType",
    "ArrayNestableType",
    "SequenceNestableType",
    "VariantNestableType",
    "StructNestableType",
    "OpaqueType",
    "FieldDescriptor",
    # Tree
    "FieldKind",
    "DescriptorForm",
    "FieldNode",
    "IntegerField",
    "FloatField",
    "StringField",
    "StructField",
    "ArrayField",
    "SequenceField",
    "EnumField",
    "VariantField",
    "FieldListReader",
    "iter_field_tree",
    "decode_fields",
]
