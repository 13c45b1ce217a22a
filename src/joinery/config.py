"""Container configuration.

The defaults applied to every service registered on a container are held in
an immutable, validated model so that a typo in an option name fails loudly
instead of being ignored.
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict

__all__ = ["ContainerDefaults"]


class ContainerDefaults(BaseModel):
    """Defaults applied to descriptors created by ``Container.register``.

    Attributes:
        share: Whether new services are shared (one instance per container).
        autowire: Whether new services may have missing parameters satisfied
            by looking up their declared types.

    Example:
        ```python
        defaults = ContainerDefaults.from_properties({"share": False})
        defaults.share       # False
        defaults.autowire    # True
        ```

    """

    model_config = ConfigDict(
        # Immutable - defaults are replaced, never modified in place
        frozen=True,
        # Strict - unknown options are rejected
        extra="forbid",
        validate_assignment=True,
    )

    share: bool = True
    autowire: bool = True

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create defaults from a properties dictionary with validation.

        Args:
            properties: Dictionary of option names to values.

        Returns:
            Validated defaults instance.

        Raises:
            ValidationError: If an option is unknown or has an invalid value.

        """
        return cls.model_validate(properties)

    def merged_with(self, properties: dict[str, Any]) -> ContainerDefaults:
        """Return new defaults with ``properties`` applied over these ones."""
        return self.from_properties({**self.model_dump(), **properties})
