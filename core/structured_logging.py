"""
Log correlation for extraction runs.

Every record carries three context fields read from contextvars:

- ``run_id``: one value per CLI invocation;
- ``phase``: the pipeline stage (``extract``, ``report``);
- ``decl``: the Go declaration being built.

Worker threads see the submitting thread's values when their tasks are run
through ``contextvars.copy_context().run``.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator

UNSET = "-"

_CONTEXT_FIELDS: Dict[str, contextvars.ContextVar[str]] = {
    name: contextvars.ContextVar(f"genz_{name}", default=UNSET)
    for name in ("run_id", "phase", "decl")
}


def build_log_format(fields=tuple(_CONTEXT_FIELDS)) -> str:
    """Format string with a ``[key=value ...]`` block for the context fields."""
    context = " ".join(f"{name}=%({name})s" for name in fields)
    return f"%(asctime)s %(levelname)-7s [{context}] %(name)s: %(message)s"


LOG_FORMAT = build_log_format()


class CorrelationFilter(logging.Filter):
    """Copy the current context field values onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, var in _CONTEXT_FIELDS.items():
            setattr(record, name, var.get())
        return True


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Install ``LOG_FORMAT`` and the correlation filter on the root handlers.

    Handlers that already exist (pytest's capture handler, a host
    application's) are reformatted instead of replaced.
    """
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
        if not any(isinstance(f, CorrelationFilter) for f in handler.filters):
            handler.addFilter(CorrelationFilter())


def set_run_id(run_id: str | None = None) -> str:
    """Set the run ID, generating a UUID when none is given."""
    value = run_id or str(uuid.uuid4())
    _CONTEXT_FIELDS["run_id"].set(value)
    return value


def get_run_id() -> str:
    return _CONTEXT_FIELDS["run_id"].get()


def get_declaration() -> str:
    """Declaration under extraction, ``-`` outside ``declaration_scope``."""
    return _CONTEXT_FIELDS["decl"].get()


@contextmanager
def _field_scope(name: str, value: str) -> Iterator[None]:
    var = _CONTEXT_FIELDS[name]
    token = var.set(value)
    try:
        yield
    finally:
        var.reset(token)


def phase_scope(phase: str):
    """Context manager labelling records with pipeline stage ``phase``."""
    return _field_scope("phase", phase)


def declaration_scope(name: str):
    """Context manager labelling records with the declaration ``name``."""
    return _field_scope("decl", name)
