"""Base model for API payloads"""

from typing import Any, Dict

from pydantic import BaseModel


class ApiModel(BaseModel):
    """
    Immutable model populated from API payloads

    Fields carry the API's camelCase names as aliases and can also be set by
    their Python names. Unknown fields are kept so newer API versions do not
    break parsing.
    """

    model_config = {
        "populate_by_name": True,
        "frozen": True,
        "extra": "allow",
    }

    def to_wire(self) -> Dict[str, Any]:
        """Serialize back to the API's field names"""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
