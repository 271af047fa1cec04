"""
Base models for Bitbucket API responses.

Every model is built through `from_api_response`, which tolerates missing or
malformed keys so that formatting never fails on partial API payloads.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound="ApiModel")


class ApiModel(BaseModel):
    """Base class for models created from Bitbucket API responses."""

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_api_response(cls: type[T], data: dict[str, Any], **kwargs: Any) -> T:
        """Create a model instance from an API response.

        Args:
            data: The raw API response data
            **kwargs: Additional context parameters

        Returns:
            An instance of the model
        """
        raise NotImplementedError("Subclasses must implement from_api_response")


def nested_get(data: Any, *keys: str, default: Any = None) -> Any:
    """Walk nested dictionaries, returning `default` on the first gap."""
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current
