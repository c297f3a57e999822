"""Base models for all records exchanged with Tick and FreshBooks.

Records parsed from remote responses are plain values: they are validated
once on creation and never mutated afterwards. Records built locally
(invoice payloads, contexts) share the same configuration.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with lenient type coercion (remote values arrive as text)
    - Serialization to/from dictionaries
    - Rejection of unknown fields

    Example:
        >>> class Client(BaseDataModel):
        ...     client_id: int
        ...     organization: str
        >>> client = Client(client_id="12", organization="Acme Inc")
        >>> client.client_id
        12
        >>> client.model_dump()
        {'client_id': 12, 'organization': 'Acme Inc'}
    """

    model_config = ConfigDict(
        # Remote XML values are strings; let pydantic coerce them
        strict=False,
        validate_assignment=True,
        extra="forbid",
        frozen=False,
    )


class FrozenDataModel(BaseDataModel):
    """Immutable variant for records that must not change after creation.

    Example:
        >>> class Line(FrozenDataModel):
        ...     description: str
        >>> line = Line(description="[Website]")
        >>> line.model_copy(update={"description": "other"}).description
        'other'
    """

    model_config = ConfigDict(
        strict=False,
        extra="forbid",
        frozen=True,
    )
