"""
Data models for extracted Go type elements.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Type:
    """A resolved type reference.

    Attributes:
        name: Fully qualified name (e.g. ``main.A``, ``[]main.A``, ``uuid.UUID``)
        internal_name: Name as written inside the declaring package
            (e.g. ``A``, ``[]A``, ``UUID``)
    """

    name: str
    internal_name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Attribute:
    """One field of a struct.

    Attributes:
        name: Field name (the type identifier for embedded fields)
        type: Resolved field type
        comments: Leading doc comment lines
        tags: Parsed struct tag, empty when the field has no tag
        is_exported: Whether the field name starts with an upper-case letter
        is_embedded: Whether the field is an embedded type
    """

    name: str
    type: Type
    comments: Tuple[str, ...] = ()
    tags: Dict[str, str] = field(default_factory=dict)
    is_exported: bool = False
    is_embedded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Method:
    """A struct receiver method or an interface member."""

    name: str
    params: Tuple[Type, ...] = ()
    returns: Tuple[Type, ...] = ()
    is_pointer_receiver: bool = False
    is_exported: bool = False
    comments: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Element:
    """The extracted model of one struct or interface declaration.

    Attributes:
        type: The declared type itself
        kind: ``struct`` or ``interface``
        attributes: Struct fields in source order; None for interfaces
        methods: Receiver methods (structs) or members (interfaces);
            an empty tuple when there are none
    """

    type: Type
    kind: str
    attributes: Optional[Tuple[Attribute, ...]] = None
    methods: Tuple[Method, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the element to a dictionary suitable for JSON serialization.

        Returns:
            Dictionary representation of the element.
        """
        return asdict(self)
