"""
String escaping for the metadata text format.

Free-form strings and enum labels are escaped by two different rules:
free-form strings also turn newlines into backslash-n, enum labels keep
newlines verbatim. Readers depend on both behaviors.
"""

_CTF_STRING_ESCAPES = {
    "\n": "\\n",
    "\\": "\\\\",
    '"': '\\"',
}

_ENUM_LABEL_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
}

_IDENTIFIER_TRANSLATION = str.maketrans({".": "_", "$": "_", ":": "_"})


def escape_ctf_string(value: str) -> str:
    """Escape a free-form string for use inside double quotes."""
    return "".join(_CTF_STRING_ESCAPES.get(c, c) for c in value)


def escape_enum_label(label: str) -> str:
    """Escape an enumeration label. Newlines are left untouched."""
    return "".join(_ENUM_LABEL_ESCAPES.get(c, c) for c in label)


def sanitize_identifier(name: str) -> str:
    """Replace characters that are not valid in identifiers ('.', '$', ':')."""
    return name.translate(_IDENTIFIER_TRANSLATION)
