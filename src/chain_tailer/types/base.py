"""Base model for reader data and configuration."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictBaseModel(BaseModel):
    """
    Immutable, strictly validated model with camelCase aliases.

    Node APIs commonly speak camelCase JSON, so `block_number` is also
    accepted (and serialized, with `by_alias=True`) as `blockNumber`.
    Values are never coerced: a block number given as `"5"` is rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        extra="forbid",
        frozen=True,
        strict=True,
    )
