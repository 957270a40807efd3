"""Expiry policies accepted by Warehouse.write."""

from datetime import datetime
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field


class Never(BaseModel):
    """The entry never expires. No ``expires`` field is written."""

    model_config = ConfigDict(frozen=True)

    def resolve(self, now: float) -> float | None:
        return None


class After(BaseModel):
    """The entry expires a number of seconds after it is written."""

    model_config = ConfigDict(frozen=True)

    seconds: float = Field(ge=0, allow_inf_nan=False, description="Lifetime in seconds")

    def resolve(self, now: float) -> float | None:
        return now + self.seconds


class At(BaseModel):
    """The entry expires at an absolute moment.

    Naive datetimes are interpreted in local time, as ``datetime.timestamp`` does.
    """

    model_config = ConfigDict(frozen=True)

    moment: datetime

    def resolve(self, now: float) -> float | None:
        return self.moment.timestamp()


ExpiryPolicy: TypeAlias = Never | After | At
