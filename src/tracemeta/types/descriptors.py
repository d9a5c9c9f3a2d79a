"""
Field Descriptors

Flat, cursor-indexed field descriptor list as received from instrumented
processes. Two historical encodings coexist:

- inline (legacy): the element/container type is embedded in the field's
  own slot (ArrayType, SequenceType, EnumType, VariantType, StructType)
- split (nestable): the field's slot carries size/alignment only and the
  element/container is the next slot in the list (ArrayNestableType,
  SequenceNestableType, EnumNestableType); variants of both encodings are
  followed by their choice fields
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Optional


class AType(Enum):
    """Type tags of field descriptors."""
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    ENUM = auto()               # inline container
    ARRAY = auto()              # inline element
    SEQUENCE = auto()           # inline element + length type
    VARIANT = auto()
    STRUCT = auto()
    ENUM_NESTABLE = auto()      # container in next slot
    ARRAY_NESTABLE = auto()     # element in next slot
    SEQUENCE_NESTABLE = auto()  # element in next slot, length by name
    VARIANT_NESTABLE = auto()
    STRUCT_NESTABLE = auto()
    OPAQUE = auto()             # tag unknown to this engine


class StringEncoding(Enum):
    """Text encoding of integers and strings."""
    NONE = "none"
    UTF8 = "UTF8"
    ASCII = "ASCII"


@dataclass
class TypeDescriptor:
    """Base class of descriptor payloads."""
    atype: ClassVar[AType] = AType.OPAQUE


@dataclass
class IntegerType(TypeDescriptor):
    atype: ClassVar[AType] = AType.INTEGER
    size: int = 32                  # bits
    alignment: int = 8              # bits
    signed: bool = False
    encoding: StringEncoding = StringEncoding.NONE
    base: int = 10
    reverse_byte_order: bool = False


@dataclass
class FloatType(TypeDescriptor):
    atype: ClassVar[AType] = AType.FLOAT
    exp_dig: int = 11
    mant_dig: int = 53
    alignment: int = 8              # bits
    reverse_byte_order: bool = False


@dataclass
class StringType(TypeDescriptor):
    atype: ClassVar[AType] = AType.STRING
    encoding: StringEncoding = StringEncoding.UTF8


@dataclass
class EnumType(TypeDescriptor):
    atype: ClassVar[AType] = AType.ENUM
    name: str = ""
    id: int = 0
    container: Optional[TypeDescriptor] = None


@dataclass
class ArrayType(TypeDescriptor):
    atype: ClassVar[AType] = AType.ARRAY
    element: Optional[TypeDescriptor] = None
    length: int = 0


@dataclass
class SequenceType(TypeDescriptor):
    atype: ClassVar[AType] = AType.SEQUENCE
    element: Optional[TypeDescriptor] = None
    length_type: Optional[TypeDescriptor] = None


@dataclass
class VariantType(TypeDescriptor):
    atype: ClassVar[AType] = AType.VARIANT
    nr_choices: int = 0
    tag_name: str = ""


@dataclass
class StructType(TypeDescriptor):
    atype: ClassVar[AType] = AType.STRUCT
    nr_fields: int = 0


@dataclass
class EnumNestableType(TypeDescriptor):
    atype: ClassVar[AType] = AType.ENUM_NESTABLE
    name: str = ""
    id: int = 0


@dataclass
class ArrayNestableType(TypeDescriptor):
    atype: ClassVar[AType] = AType.ARRAY_NESTABLE
    length: int = 0
    alignment: int = 0              # bytes


@dataclass
class SequenceNestableType(TypeDescriptor):
    atype: ClassVar[AType] = AType.SEQUENCE_NESTABLE
    length_name: str = ""
    alignment: int = 0              # bytes


@dataclass
class VariantNestableType(TypeDescriptor):
    atype: ClassVar[AType] = AType.VARIANT_NESTABLE
    nr_choices: int = 0
    tag_name: str = ""
    alignment: int = 0              # bytes


@dataclass
class StructNestableType(TypeDescriptor):
    atype: ClassVar[AType] = AType.STRUCT_NESTABLE
    nr_fields: int = 0
    alignment: int = 0              # bytes


@dataclass
class OpaqueType(TypeDescriptor):
    """A descriptor whose tag is not understood."""
    atype: ClassVar[AType] = AType.OPAQUE
    tag: int = -1


@dataclass
class FieldDescriptor:
    """One slot of a flat field list: a name and a typed payload."""
    name: str
    type: TypeDescriptor

    def __repr__(self):
        return f"Field({self.name!r}, {self.type.atype.name})"
