"""Transformation defaults for record-link batches."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .env import env_flag, env_positive_int

VALIDATE_ENV = "LINKTRANSFORM_VALIDATE"
FIX_ENV = "LINKTRANSFORM_FIX"
MAX_IN_FLIGHT_ENV = "LINKTRANSFORM_MAX_IN_FLIGHT"


@dataclass(frozen=True, slots=True)
class TransformConfig:
    """Options applied to every record of a batch.

    ``max_in_flight`` of ``None`` leaves the number of concurrently running
    conversions unbounded.
    """

    validate: bool = False
    fix: bool = False
    max_in_flight: int | None = None

    def with_overrides(
        self,
        *,
        validate: bool | None = None,
        fix: bool | None = None,
        max_in_flight: int | None = None,
    ) -> TransformConfig:
        """Return a copy where every non-``None`` argument replaces the stored value."""

        return replace(
            self,
            validate=self.validate if validate is None else validate,
            fix=self.fix if fix is None else fix,
            max_in_flight=self.max_in_flight if max_in_flight is None else max_in_flight,
        )


def get_transform_config() -> TransformConfig:
    return TransformConfig(
        validate=env_flag(VALIDATE_ENV, default=False),
        fix=env_flag(FIX_ENV, default=False),
        max_in_flight=env_positive_int(MAX_IN_FLIGHT_ENV),
    )
