"""Node interface schema served by the describe endpoint."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

# fieldType -> Python type accepted for values of that field
FIELD_TYPES = {
    "string": str,
}


class FieldDescriptor(BaseModel):
    """A single declared input or output field."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field_type: str = Field(default="string", alias="fieldType")
    name: str = Field(..., min_length=1)
    label: str = ""

    @field_validator("field_type")
    @classmethod
    def field_type_known(cls, v: str) -> str:
        if v not in FIELD_TYPES:
            raise ValueError(f"unsupported fieldType '{v}' (supported: {', '.join(FIELD_TYPES)})")
        return v

    @property
    def python_type(self) -> type:
        return FIELD_TYPES[self.field_type]


class NodeDefinition(BaseModel):
    """One workflow node exposed by this service."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str = ""
    inputs: List[FieldDescriptor] = Field(default_factory=list)
    outputs: List[FieldDescriptor] = Field(..., min_length=1)

    @field_validator("inputs", "outputs")
    @classmethod
    def names_unique(cls, v: List[FieldDescriptor]) -> List[FieldDescriptor]:
        names = [f.name for f in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate field name(s): {', '.join(duplicates)}")
        return v


class NodeInterfaceSchema(BaseModel):
    """Everything the orchestrator needs to render and wire our nodes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    node_definitions: List[NodeDefinition] = Field(..., alias="nodeDefinitions", min_length=1)

    @property
    def primary(self) -> NodeDefinition:
        """The node definition executed by /do."""
        return self.node_definitions[0]

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
