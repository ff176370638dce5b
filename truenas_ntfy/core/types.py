"""Wire types for the TrueNAS alert API and the ntfy publish API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TrueNASDate(BaseModel):
    """TrueNAS encodes timestamps as ``{"$date": <epoch ms>}``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    epoch_ms: int = Field(alias="$date")


class Alert(BaseModel):
    """An active alert as returned by ``GET /api/v2.0/alert/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    level: str
    formatted: str
    dismissed: bool = False
    created: TrueNASDate = Field(alias="datetime")
    last_occurrence: TrueNASDate | None = None

    uuid: str = ""
    id: str = ""
    source: str = ""
    klass: str = ""
    key: str = ""
    node: str = ""
    text: str = ""
    one_shot: bool = False
    args: Any = None
    mail: Any = None

    @property
    def created_ms(self) -> int:
        return self.created.epoch_ms

    @property
    def last_occurrence_ms(self) -> int:
        # Older appliances omit last_occurrence; fall back to creation time.
        if self.last_occurrence is None:
            return self.created.epoch_ms
        return self.last_occurrence.epoch_ms

    @property
    def ident(self) -> str:
        """Best available identifier for log correlation."""
        return self.uuid or self.id or self.klass


class NtfyAction(BaseModel):
    """A user action button attached to an ntfy notification."""

    action: str = "view"
    label: str
    url: str
    clear: bool | None = None


class NtfyMessage(BaseModel):
    """JSON body for publishing to the ntfy root URL."""

    topic: str
    title: str
    message: str
    tags: list[str] = Field(default_factory=list)
    priority: int = Field(default=0, ge=0, le=5)
    click: str | None = None
    attach: str | None = None
    filename: str | None = None
    actions: list[NtfyAction] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialise for the wire, omitting unset optional fields."""
        return self.model_dump(exclude_none=True)


class NtfyResponseAction(BaseModel):
    """Action as echoed back by ntfy, with its server-assigned id."""

    id: str = ""
    action: str = ""
    label: str = ""
    clear: bool = False
    url: str = ""


class NtfyResponse(BaseModel):
    """Acknowledgement returned by ntfy for a published message."""

    model_config = ConfigDict(extra="ignore")

    id: str
    time: int
    topic: str
    expires: int | None = None
    event: str = "message"
    title: str = ""
    message: str = ""
    priority: int | None = None
    tags: list[str] = Field(default_factory=list)
    actions: list[NtfyResponseAction] = Field(default_factory=list)
