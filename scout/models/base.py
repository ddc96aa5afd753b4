"""
Shared model configuration.
Persisted JSON uses camelCase keys; Python code uses snake_case field names.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_storage(self) -> dict:
        """Alias-keyed, JSON-safe representation used for persistence."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
