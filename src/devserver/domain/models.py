"""The information snapshot served by the informational endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

TIME_FORMAT = "%H:%M:%S"


class InfoSnapshot(BaseModel):
    """Welcome message, local wall-clock time and outbound host address.

    Built fresh for every request and never mutated. Serialized (JSON and
    template context) under the wire names ``WelcomeMsg``, ``Time`` and
    ``HostIP``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    welcome_message: str = Field(alias="WelcomeMsg", min_length=1)
    current_time: str = Field(alias="Time", description="HH:MM:SS, local time")
    host_ip: str = Field(alias="HostIP", description="Outbound IPv4/IPv6 address")

    @classmethod
    def capture(
        cls,
        welcome_message: str,
        resolve_ip: Callable[[], str],
        now: datetime | None = None,
    ) -> InfoSnapshot:
        """Take a snapshot of the host at this moment."""
        when = now or datetime.now()
        return cls(
            welcome_message=welcome_message,
            current_time=when.strftime(TIME_FORMAT),
            host_ip=resolve_ip(),
        )

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"{{{self.welcome_message} {self.current_time} {self.host_ip}}}"
