# gpu_pricing/models/base.py

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every payload on the wire: snake_case attributes in Python,
    camelCase keys in JSON. Either spelling is accepted on input.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
