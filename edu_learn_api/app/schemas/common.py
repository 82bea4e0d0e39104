"""
Shared base model for API payloads.

Documents in MongoDB and JSON on the wire use camelCase keys
(``instructorEmail``, ``enrolledCount``) while the Python side uses
snake_case attributes.  ``CamelModel`` bridges the two: it accepts
either spelling on input and FastAPI serialises responses by alias.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
