"""
Python ingestion adapter: host descriptions from Python types, and the
markers used to annotate them.
"""

from .markers import (
    Compare,
    CreditCard,
    Custom,
    Display,
    Email,
    Hidden,
    Ignore,
    Length,
    Pattern,
    Percentage,
    Phone,
    Range,
    Required,
    UIHint,
    Url,
    as_interface,
    enum_labels,
    ignore_type,
)
from .python_types import PythonTypeReader, import_type, read_type

__all__ = [
    "PythonTypeReader",
    "read_type",
    "import_type",
    # Markers
    "Required",
    "Range",
    "Length",
    "Pattern",
    "Compare",
    "Email",
    "Url",
    "Phone",
    "CreditCard",
    "Custom",
    "Display",
    "UIHint",
    "Hidden",
    "Percentage",
    "Ignore",
    "ignore_type",
    "as_interface",
    "enum_labels",
]
