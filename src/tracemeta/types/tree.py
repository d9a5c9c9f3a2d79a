"""
Field Tree

Explicit tree form of the flat field descriptor list. Each top-level field
becomes one node; arrays, sequences and enums own their element/container
type and variants own their choice nodes, so emitting metadata is ordinary
recursion over the tree.

The decoder is lazy: iter_field_tree() yields one top-level node at a time,
which lets callers emit the fields preceding a malformed one.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, Optional, Sequence

from tracemeta.errors import InvalidFormatError, TruncatedDescriptorsError
from tracemeta.types.descriptors import (
    AType,
    FieldDescriptor,
    FloatType,
    IntegerType,
    StringEncoding,
    TypeDescriptor,
)


class FieldKind(Enum):
    """Kinds of tree nodes."""
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    STRUCT = auto()
    ARRAY = auto()
    SEQUENCE = auto()
    ENUM = auto()
    VARIANT = auto()


class DescriptorForm(Enum):
    """Which wire encoding a node was decoded from."""
    INLINE = auto()     # element/container embedded in the field's own slot
    SPLIT = auto()      # element/container in the following slot


@dataclass
class FieldNode:
    """Base class for tree nodes."""
    kind: FieldKind = None  # Set by subclasses in __post_init__
    name: str = ""
    form: DescriptorForm = DescriptorForm.INLINE


@dataclass
class IntegerField(FieldNode):
    integer: IntegerType = field(default_factory=IntegerType)

    def __post_init__(self):
        self.kind = FieldKind.INTEGER


@dataclass
class FloatField(FieldNode):
    float_type: FloatType = field(default_factory=FloatType)

    def __post_init__(self):
        self.kind = FieldKind.FLOAT


@dataclass
class StringField(FieldNode):
    encoding: StringEncoding = StringEncoding.UTF8

    def __post_init__(self):
        self.kind = FieldKind.STRING


@dataclass
class StructField(FieldNode):
    nr_fields: int = 0
    alignment: int = 0      # bytes, split form only

    def __post_init__(self):
        self.kind = FieldKind.STRUCT


@dataclass
class ArrayField(FieldNode):
    element: Optional[TypeDescriptor] = None
    length: int = 0
    alignment: int = 0      # bytes, split form only

    def __post_init__(self):
        self.kind = FieldKind.ARRAY


@dataclass
class SequenceField(FieldNode):
    """
    Variable-length array.

    The inline form carries `length_type` and declares a hidden length
    field; the split form refers to an existing field by `length_name`.
    """
    element: Optional[TypeDescriptor] = None
    length_type: Optional[TypeDescriptor] = None
    length_name: Optional[str] = None
    alignment: int = 0      # bytes, split form only

    def __post_init__(self):
        self.kind = FieldKind.SEQUENCE


@dataclass
class EnumField(FieldNode):
    enum_name: str = ""
    enum_id: int = 0
    container: Optional[TypeDescriptor] = None

    def __post_init__(self):
        self.kind = FieldKind.ENUM


@dataclass
class VariantField(FieldNode):
    tag_name: str = ""
    alignment: int = 0      # bytes, always 0 for the inline form
    choices: List[FieldNode] = field(default_factory=list)

    def __post_init__(self):
        self.kind = FieldKind.VARIANT

    def __repr__(self):
        return f"Variant({self.name}, <{self.tag_name}>, {len(self.choices)} choices)"


class FieldListReader:
    """
    Cursor over a flat descriptor list.

    Usage:
        reader = FieldListReader(descriptors)
        while not reader.at_end():
            node = reader.read_field()
    """

    def __init__(self, descriptors: Sequence[FieldDescriptor]):
        self.descriptors = descriptors
        self.pos = 0
        self.length = len(descriptors)

    def at_end(self) -> bool:
        return self.pos >= self.length

    def _take(self, owner: Optional[str] = None) -> FieldDescriptor:
        """Consume the current slot, or fail if the list is exhausted."""
        if self.pos >= self.length:
            raise TruncatedDescriptorsError(
                f"Field list exhausted at slot {self.pos}", owner
            )
        descriptor = self.descriptors[self.pos]
        self.pos += 1
        return descriptor

    def read_field(self) -> FieldNode:
        """Decode one complete field (including nested slots) into a node."""
        descriptor = self._take()
        name = descriptor.name
        t = descriptor.type
        atype = t.atype

        if atype == AType.INTEGER:
            return IntegerField(name=name, integer=t)
        if atype == AType.FLOAT:
            return FloatField(name=name, float_type=t)
        if atype == AType.STRING:
            return StringField(name=name, encoding=t.encoding)
        if atype == AType.STRUCT:
            return StructField(name=name, nr_fields=t.nr_fields)
        if atype == AType.STRUCT_NESTABLE:
            return StructField(name=name, nr_fields=t.nr_fields,
                               alignment=t.alignment, form=DescriptorForm.SPLIT)
        if atype == AType.ARRAY:
            return ArrayField(name=name, element=t.element, length=t.length)
        if atype == AType.ARRAY_NESTABLE:
            element = self._take(name).type
            return ArrayField(name=name, element=element, length=t.length,
                              alignment=t.alignment, form=DescriptorForm.SPLIT)
        if atype == AType.SEQUENCE:
            return SequenceField(name=name, element=t.element, length_type=t.length_type)
        if atype == AType.SEQUENCE_NESTABLE:
            element = self._take(name).type
            return SequenceField(name=name, element=element, length_name=t.length_name,
                                 alignment=t.alignment, form=DescriptorForm.SPLIT)
        if atype == AType.ENUM:
            return EnumField(name=name, enum_name=t.name, enum_id=t.id,
                             container=t.container)
        if atype == AType.ENUM_NESTABLE:
            container = self._take(name).type
            return EnumField(name=name, enum_name=t.name, enum_id=t.id,
                             container=container, form=DescriptorForm.SPLIT)
        if atype in (AType.VARIANT, AType.VARIANT_NESTABLE):
            split = atype == AType.VARIANT_NESTABLE
            variant = VariantField(
                name=name,
                tag_name=t.tag_name,
                alignment=t.alignment if split else 0,
                form=DescriptorForm.SPLIT if split else DescriptorForm.INLINE,
            )
            for _ in range(t.nr_choices):
                variant.choices.append(self.read_field())
            return variant

        raise InvalidFormatError(f"Unsupported field type {atype.name}", name)


def iter_field_tree(descriptors: Sequence[FieldDescriptor]) -> Iterator[FieldNode]:
    """Lazily decode a flat descriptor list into top-level tree nodes."""
    reader = FieldListReader(descriptors)
    while not reader.at_end():
        yield reader.read_field()


def decode_fields(descriptors: Sequence[FieldDescriptor]) -> List[FieldNode]:
    """Decode a whole flat descriptor list into tree nodes."""
    return list(iter_field_tree(descriptors))
