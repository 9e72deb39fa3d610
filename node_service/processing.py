"""Processing functions - the business logic behind /do.

A processing function receives the declared input values as positional
arguments, in schema order, and returns the output value (one declared
output) or a sequence of output values (several declared outputs). It must
be pure and synchronous.

Feel free to add your own logic here, or point the `processor` setting at
any importable "package.module:function".
"""

import importlib
import logging
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

ProcessingFunction = Callable[..., Any]


class ProcessorNotFound(Exception):
    """The configured processor reference does not resolve to a callable."""


def echo(input_field: str) -> str:
    """Reflect the single input unchanged."""
    return input_field


def concat(*input_fields: str) -> str:
    """Join all inputs in declaration order."""
    return "".join(input_fields)


BUILTIN_PROCESSORS: Dict[str, ProcessingFunction] = {
    "echo": echo,
    "concat": concat,
}


def resolve_processor(ref: str) -> ProcessingFunction:
    """Resolve a built-in name or a 'package.module:function' path.

    Raises:
        ProcessorNotFound: unknown name, unimportable module, missing or
            non-callable attribute
    """
    if ref in BUILTIN_PROCESSORS:
        return BUILTIN_PROCESSORS[ref]

    if ":" not in ref:
        raise ProcessorNotFound(
            f"Unknown processor '{ref}' (built-ins: {', '.join(BUILTIN_PROCESSORS)}; "
            f"or use 'module:function')"
        )

    module_name, func_name = ref.split(":", 1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ProcessorNotFound(f"Cannot import processor module '{module_name}': {e}") from e

    func = getattr(module, func_name, None)
    if func is None:
        raise ProcessorNotFound(f"Module {module_name} has no function '{func_name}'")
    if not callable(func):
        raise ProcessorNotFound(f"{module_name}.{func_name} is not callable")

    logger.info(f"Resolved processor {ref}")
    return func
