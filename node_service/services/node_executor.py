"""Node executor - validates /do payloads and runs the processing function."""

import logging
from typing import Any, Dict, List

from node_service.models.schema import NodeDefinition
from node_service.processing import ProcessingFunction
from node_service.validation import validate_fields

logger = logging.getLogger(__name__)


class ProcessingContractError(Exception):
    """The processing function's result does not match the declared outputs."""


class NodeExecutor:
    """Binds one node definition to its processing function."""

    def __init__(self, definition: NodeDefinition, processor: ProcessingFunction):
        self.definition = definition
        self.processor = processor

    def execute(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate inputs, run the processor and wrap the outputs by name.

        Raises:
            PayloadValidationError: a declared input is missing or mistyped
            ProcessingContractError: the processor returned the wrong shape
        """
        inputs = validate_fields(payload, self.definition.inputs)
        logger.debug(f"[Node] Processing {self.definition.name} with {len(inputs)} input(s)")

        result = self.processor(*inputs)
        return self._wrap_outputs(result)

    def _wrap_outputs(self, result: Any) -> Dict[str, Any]:
        outputs = self.definition.outputs
        if len(outputs) == 1:
            values: List[Any] = [result]
        elif isinstance(result, (list, tuple)) and len(result) == len(outputs):
            values = list(result)
        else:
            count = len(result) if isinstance(result, (list, tuple)) else 1
            raise ProcessingContractError(
                f"Processor for '{self.definition.name}' returned {count} value(s) "
                f"for {len(outputs)} declared output(s)"
            )

        for descriptor, value in zip(outputs, values):
            if type(value) is not descriptor.python_type:
                raise ProcessingContractError(
                    f"Output '{descriptor.name}' expected {descriptor.field_type}, "
                    f"got {type(value).__name__}"
                )

        return {descriptor.name: value for descriptor, value in zip(outputs, values)}
