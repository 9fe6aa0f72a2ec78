"""Change records sent by the canvas during direct manipulation.

Dragging, resizing, selecting and deleting on the canvas produce batches
of these changes. They are discriminated on ``type``.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from chatflow.models.flow_graph import Dimensions, FlowEdge, FlowNode, Position


class NodeDimensionsChange(BaseModel):
    type: Literal["dimensions"] = "dimensions"
    id: str
    dimensions: Dimensions | None = None  # None while a resize is only starting
    resizing: bool | None = None


class NodePositionChange(BaseModel):
    type: Literal["position"] = "position"
    id: str
    position: Position | None = None  # None while a drag is only starting
    dragging: bool | None = None


class NodeSelectChange(BaseModel):
    type: Literal["select"] = "select"
    id: str
    selected: bool


class NodeRemoveChange(BaseModel):
    type: Literal["remove"] = "remove"
    id: str


class NodeAddChange(BaseModel):
    type: Literal["add"] = "add"
    item: FlowNode


class NodeReplaceChange(BaseModel):
    type: Literal["replace"] = "replace"
    id: str
    item: FlowNode


NodeChange = Annotated[
    Union[
        NodeDimensionsChange,
        NodePositionChange,
        NodeSelectChange,
        NodeRemoveChange,
        NodeAddChange,
        NodeReplaceChange,
    ],
    Field(discriminator="type"),
]


class EdgeSelectChange(BaseModel):
    type: Literal["select"] = "select"
    id: str
    selected: bool


class EdgeRemoveChange(BaseModel):
    type: Literal["remove"] = "remove"
    id: str


class EdgeAddChange(BaseModel):
    type: Literal["add"] = "add"
    item: FlowEdge


class EdgeReplaceChange(BaseModel):
    type: Literal["replace"] = "replace"
    id: str
    item: FlowEdge


EdgeChange = Annotated[
    Union[EdgeSelectChange, EdgeRemoveChange, EdgeAddChange, EdgeReplaceChange],
    Field(discriminator="type"),
]
