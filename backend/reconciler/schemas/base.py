"""Shared base for models that cross the engine boundary."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ContractModel(BaseModel):
    """Pydantic model whose JSON form uses camelCase keys.

    Python code reads and writes snake_case attributes; ``to_json_dict`` gives
    the external contract shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
