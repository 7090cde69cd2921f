"""
Base models for data client responses.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict:
        """Dump to the JSON-compatible wire shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)
