"""Renderer message protocol.

Inbound (renderer -> core) messages form a discriminated union on "type".
Outbound (core -> renderer) messages serialize with camelCase keys via
to_payload().
"""

from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .model import EdgeStyle, Position
from .projection import ViewModel


ImageFormat = Literal["png", "svg"]


# Inbound

class NodePositionChanged(BaseModel):
    """Final positions reported at the end of a drag gesture."""
    type: Literal["nodePositionChanged"]
    positions: Dict[str, Position]

    model_config = ConfigDict(extra="ignore")


class EditNodeLabel(BaseModel):
    type: Literal["editNodeLabel"]
    node_id: str = Field(..., alias="nodeId")
    current_label: Optional[str] = Field(None, alias="currentLabel")
    group: Literal["table", "column"]

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EdgePayload(BaseModel):
    """An edge as drawn by the renderer. Its id is provisional."""
    id: Optional[str] = None
    from_: str = Field(..., alias="from")
    to: str
    label: Optional[str] = None
    arrows: Optional[str] = None
    color: Optional[str] = None
    style: Optional[EdgeStyle] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EdgeRef(BaseModel):
    id: str

    model_config = ConfigDict(extra="ignore")


class EdgeProperties(BaseModel):
    id: str
    label: Optional[str] = None
    color: Optional[str] = None
    style: Optional[EdgeStyle] = None
    arrows: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class EdgeAdded(BaseModel):
    type: Literal["edgeAdded"]
    edge: EdgePayload

    model_config = ConfigDict(extra="ignore")


class EdgeDeleted(BaseModel):
    type: Literal["edgeDeleted"]
    edge: EdgeRef

    model_config = ConfigDict(extra="ignore")


class EdgeUpdated(BaseModel):
    type: Literal["edgeUpdated"]
    edge: EdgeProperties

    model_config = ConfigDict(extra="ignore")


class ExportImage(BaseModel):
    """A captured renderer image as a data URI, to be written to path."""
    type: Literal["exportImage"]
    image_data: str = Field(..., alias="imageData")
    path: str

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


InboundMessage = Annotated[
    Union[NodePositionChanged, EditNodeLabel, EdgeAdded, EdgeDeleted, EdgeUpdated, ExportImage],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter = TypeAdapter(InboundMessage)


def parse_inbound_message(data: dict) -> InboundMessage:
    """Validate a raw renderer message (raises pydantic.ValidationError)."""
    return _inbound_adapter.validate_python(data)


# Outbound

class UpdateDataMessage(BaseModel):
    """Replace the renderer's whole view."""
    type: Literal["updateData"] = "updateData"
    view: ViewModel

    def to_payload(self) -> dict:
        return {"type": self.type, **self.view.to_payload()}


class LabelUpdatedMessage(BaseModel):
    """Patch one node label in place."""
    type: Literal["labelUpdated"] = "labelUpdated"
    node_id: str = Field(..., alias="nodeId")
    new_label: str = Field(..., alias="newLabel")

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ExportImageRequest(BaseModel):
    """Ask the renderer to capture an image and send it back as exportImage."""
    type: Literal["exportImage"] = "exportImage"
    format: ImageFormat
    path: str

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


OutboundMessage = Union[UpdateDataMessage, LabelUpdatedMessage, ExportImageRequest]

__all__ = [
    "NodePositionChanged",
    "EditNodeLabel",
    "EdgePayload",
    "EdgeRef",
    "EdgeProperties",
    "EdgeAdded",
    "EdgeDeleted",
    "EdgeUpdated",
    "ExportImage",
    "InboundMessage",
    "parse_inbound_message",
    "UpdateDataMessage",
    "LabelUpdatedMessage",
    "ExportImageRequest",
    "OutboundMessage",
]
