"""
Element building: the entry point of the extraction engine.

``build_element`` turns one named struct or interface declaration of a loaded
package into an ``Element``. Calls never mutate the package, so independent
calls for different names can run concurrently (``build_elements``).
"""

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from core.structured_logging import declaration_scope
from extraction.config import KIND_INTERFACE, KIND_STRUCT
from extraction.errors import NotFoundError
from extraction.members import (
    extract_attributes,
    extract_contract_methods,
    extract_record_methods,
)
from extraction.models import Element
from extraction.package import GoPackage
from extraction.resolver import Scope, resolve_type
from extraction.syntax import Ident, InterfaceType, StructType

logger = logging.getLogger(__name__)


def build_element(package: GoPackage, name: str) -> Element:
    """Extract the Element for the struct or interface called ``name``.

    Args:
        package: The loaded package.
        name: Name of a top-level type declaration.

    Returns:
        The extracted Element. Structs carry attributes and receiver
        methods; interfaces carry their (expanded) members.

    Raises:
        NotFoundError: If ``name`` is not declared or is not a struct or
            interface.
        UnresolvedTypeError: If a referenced type cannot be resolved.
        MalformedTagError: If a struct field has a malformed tag.

    Example:
        >>> pkg = load_package_from_source("package main\\ntype A interface{}")
        >>> build_element(pkg, "A").type
        Type(name='main.A', internal_name='A')
    """
    with declaration_scope(name):
        spec = package.lookup(name)
        if spec is None:
            raise NotFoundError(name, f"not declared in package {package.name}")

        scope = Scope(
            package=package,
            file_name=spec.pos.file_name,
            type_params=frozenset(spec.type_params),
        )
        element_type = resolve_type(Ident(name), scope)

        if isinstance(spec.type, StructType) and not spec.is_alias:
            element = Element(
                type=element_type,
                kind=KIND_STRUCT,
                attributes=extract_attributes(spec.type.fields, scope),
                methods=extract_record_methods(package, name),
            )
        elif isinstance(spec.type, InterfaceType) and not spec.is_alias:
            element = Element(
                type=element_type,
                kind=KIND_INTERFACE,
                attributes=None,
                methods=extract_contract_methods(spec.type, scope, chain=(name,)),
            )
        else:
            raise NotFoundError(name, "is not a struct or interface declaration")

        logger.debug(
            f"Built {element.kind} element {element.type.name} "
            f"with {len(element.attributes or ())} attributes and {len(element.methods)} methods"
        )
        return element


def build_elements(
    package: GoPackage,
    names: Sequence[str],
    max_workers: Optional[int] = None,
) -> List[Element]:
    """Extract several Elements from the same package.

    Args:
        package: The loaded package.
        names: Type names to extract.
        max_workers: Thread count; None or 1 runs sequentially.

    Returns:
        Elements in the order of ``names``.

    Raises:
        The first error raised by any ``build_element`` call.
    """
    if not max_workers or max_workers <= 1 or len(names) <= 1:
        return [build_element(package, name) for name in names]

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        # Each task runs in a copy of the caller context so run_id reaches the logs
        futures = [
            pool.submit(contextvars.copy_context().run, build_element, package, name)
            for name in names
        ]
        return [future.result() for future in futures]
