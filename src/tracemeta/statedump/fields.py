"""
Field Statedump

Emits the type declaration of each field of an event payload or channel
context. Fields are decoded from the flat descriptor list one top-level
field at a time and emitted by recursion over the resulting tree; a field
is fully validated before any of its text is written.

Only integers may be array/sequence elements or enum containers, and only
empty structs are supported. Anything else is an InvalidFormatError.
"""

from typing import Optional, Sequence

from tracemeta.errors import InvalidFormatError, NotFoundError
from tracemeta.metadata.escape import escape_enum_label, sanitize_identifier
from tracemeta.registry.entities import EnumRegistration
from tracemeta.registry.sections import DumpSection
from tracemeta.types.descriptors import (
    AType,
    FieldDescriptor,
    IntegerType,
    StringEncoding,
    TypeDescriptor,
)
from tracemeta.types.tree import (
    ArrayField,
    DescriptorForm,
    EnumField,
    FieldKind,
    FieldNode,
    FloatField,
    IntegerField,
    SequenceField,
    StringField,
    StructField,
    VariantField,
    iter_field_tree,
)


CHAR_BIT = 8


def _require_integer(type_desc: Optional[TypeDescriptor], field_name: str,
                     role: str) -> IntegerType:
    if type_desc is None or type_desc.atype != AType.INTEGER:
        got = type_desc.atype.name if type_desc is not None else "nothing"
        raise InvalidFormatError(f"Only integers are supported as {role}, got {got}",
                                 field_name)
    return type_desc


class FieldStatedump:
    """
    Type-tree walker bound to a held dump section.

    Usage:
        walker = FieldStatedump(section)
        walker.dump_fields(event.fields, nesting=2)
    """

    def __init__(self, section: DumpSection):
        self.section = section
        self.registry = section.registry
        # Reversed primitives name the byte order opposite to the native one
        self._bo_reverse = f" byte_order = {self.registry.byte_order.reverse.value};"
        self._dispatch = {
            FieldKind.INTEGER: self._dump_integer,
            FieldKind.FLOAT: self._dump_float,
            FieldKind.STRING: self._dump_string,
            FieldKind.STRUCT: self._dump_struct,
            FieldKind.ARRAY: self._dump_array,
            FieldKind.SEQUENCE: self._dump_sequence,
            FieldKind.ENUM: self._dump_enum,
            FieldKind.VARIANT: self._dump_variant,
        }

    def dump_fields(self, descriptors: Sequence[FieldDescriptor], nesting: int) -> None:
        """Decode and emit every field of a flat descriptor list."""
        for node in iter_field_tree(descriptors):
            self.dump_field(node, nesting)

    def dump_field(self, node: FieldNode, nesting: int) -> None:
        handler = self._dispatch.get(node.kind)
        if handler is None:
            raise InvalidFormatError(f"Unsupported field kind {node.kind}", node.name)
        handler(node, nesting)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _emit_line(self, nesting: int, text: str) -> None:
        self.section.emit_tabs(nesting)
        self.section.emit(text)

    def _byte_order(self, reverse: bool) -> str:
        return self._bo_reverse if reverse else ""

    def _integer_decl(self, integer: IntegerType) -> str:
        return (
            f"integer {{ size = {integer.size}; align = {integer.alignment}; "
            f"signed = {int(integer.signed)}; encoding = {integer.encoding.value}; "
            f"base = {integer.base};{self._byte_order(integer.reverse_byte_order)} }}"
        )

    def _emit_padding(self, nesting: int, alignment: int, name: str) -> None:
        if alignment:
            self._emit_line(nesting,
                            f"struct {{ }} align({alignment * CHAR_BIT}) _{name}_padding;\n")

    # =========================================================================
    # Primitive and container fields
    # =========================================================================

    def _dump_integer(self, node: IntegerField, nesting: int) -> None:
        self._emit_line(nesting, f"{self._integer_decl(node.integer)} _{node.name};\n")

    def _dump_float(self, node: FloatField, nesting: int) -> None:
        f = node.float_type
        self._emit_line(
            nesting,
            f"floating_point {{ exp_dig = {f.exp_dig}; mant_dig = {f.mant_dig}; "
            f"align = {f.alignment};{self._byte_order(f.reverse_byte_order)} }} _{node.name};\n",
        )

    def _dump_string(self, node: StringField, nesting: int) -> None:
        # Default encoding is UTF8
        encoding = " { encoding = ASCII; }" if node.encoding == StringEncoding.ASCII else ""
        self._emit_line(nesting, f"string{encoding} _{node.name};\n")

    def _dump_struct(self, node: StructField, nesting: int) -> None:
        if node.nr_fields != 0:
            raise InvalidFormatError(
                f"Only empty structures are supported, got {node.nr_fields} fields",
                node.name,
            )
        if node.form == DescriptorForm.SPLIT and node.alignment:
            self._emit_line(nesting,
                            f"struct {{}} align({node.alignment * CHAR_BIT}) _{node.name};\n")
        else:
            self._emit_line(nesting, f"struct {{}} _{node.name};\n")

    def _dump_array(self, node: ArrayField, nesting: int) -> None:
        element = _require_integer(node.element, node.name, "array elements")
        if node.form == DescriptorForm.SPLIT:
            self._emit_padding(nesting, node.alignment, node.name)
        self._emit_line(nesting,
                        f"{self._integer_decl(element)} _{node.name}[{node.length}];\n")

    def _dump_sequence(self, node: SequenceField, nesting: int) -> None:
        element = _require_integer(node.element, node.name, "sequence elements")
        if node.form == DescriptorForm.INLINE:
            length_type = _require_integer(node.length_type, node.name, "sequence lengths")
            self._emit_line(nesting,
                            f"{self._integer_decl(length_type)} __{node.name}_length;\n")
            self._emit_line(
                nesting,
                f"{self._integer_decl(element)} _{node.name}[ __{node.name}_length ];\n",
            )
        else:
            self._emit_padding(nesting, node.alignment, node.name)
            self._emit_line(
                nesting,
                f"{self._integer_decl(element)} _{node.name}[ _{node.length_name} ];\n",
            )

    # =========================================================================
    # Enumerations
    # =========================================================================

    def _lookup_enum(self, node: EnumField) -> EnumRegistration:
        reg_enum = self.registry.lookup_enum(node.enum_name, node.enum_id)
        if reg_enum is None:
            raise NotFoundError(
                f"Enumeration '{node.enum_name}' (id {node.enum_id}) not found",
                node.name,
            )
        return reg_enum

    def _dump_enum(self, node: EnumField, nesting: int) -> None:
        container = _require_integer(node.container, node.name, "enum containers")
        reg_enum = self._lookup_enum(node)

        self._emit_line(
            nesting,
            f"enum : integer {{ size = {container.size}; align = {container.alignment}; "
            f"signed = {int(container.signed)}; encoding = {container.encoding.value}; "
            f"base = {container.base}; }} {{\n",
        )
        for entry in reg_enum.entries:
            self.section.emit_tabs(nesting + 1)
            self.section.emit(f'"{escape_enum_label(entry.label)}"')
            if entry.is_auto:
                self.section.emit(",\n")
            elif entry.is_single_value:
                self.section.emit(f" = {entry.start.to_ctf()},\n")
            else:
                self.section.emit(f" = {entry.start.to_ctf()} ... {entry.end.to_ctf()},\n")
        self._emit_line(nesting, f"}} _{sanitize_identifier(node.name)};\n")

    # =========================================================================
    # Variants
    # =========================================================================

    def _dump_variant(self, node: VariantField, nesting: int) -> None:
        self._emit_padding(nesting, node.alignment, node.name)
        self._emit_line(nesting, f"variant <_{sanitize_identifier(node.tag_name)}> {{\n")
        for choice in node.choices:
            self.dump_field(choice, nesting + 1)
        self._emit_line(nesting, f"}} _{sanitize_identifier(node.name)};\n")
