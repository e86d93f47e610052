from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Base class for domain entities (mutable, identified by an id field)."""

    model_config = ConfigDict(validate_assignment=True)
