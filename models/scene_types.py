"""
Pydantic models for vector scene graphs
Closed unions of node, paint and path segment variants consumed by the scene renderer
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field

from models.graphics_types import LineCapStyle, LineJoinStyle, Transform

class FillRule(str, Enum):
    NON_ZERO = "nonzero"
    EVEN_ODD = "evenodd"

class RgbBytes(BaseModel):
    """8-bit RGB color as found in scene sources"""
    red: int = Field(ge=0, le=255)
    green: int = Field(ge=0, le=255)
    blue: int = Field(ge=0, le=255)

    def normalized(self) -> Tuple[float, float, float]:
        return (self.red / 255.0, self.green / 255.0, self.blue / 255.0)

# Paint variants
class SolidColor(BaseModel):
    kind: Literal["solid"] = "solid"
    color: RgbBytes

class GradientReference(BaseModel):
    """Paint resolved against SceneTree.definitions by id"""
    kind: Literal["gradient"] = "gradient"
    id: str

Paint = Annotated[Union[SolidColor, GradientReference], Field(discriminator="kind")]

class Fill(BaseModel):
    paint: Paint
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    rule: FillRule = FillRule.NON_ZERO

class Stroke(BaseModel):
    paint: Paint
    width: float = 1.0
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    dasharray: Optional[List[float]] = None
    dashoffset: float = 0.0
    linecap: LineCapStyle = LineCapStyle.BUTT
    linejoin: LineJoinStyle = LineJoinStyle.MITER
    miterlimit: float = 4.0

# Path segment variants
class MoveTo(BaseModel):
    kind: Literal["move_to"] = "move_to"
    x: float
    y: float

class LineTo(BaseModel):
    kind: Literal["line_to"] = "line_to"
    x: float
    y: float

class CurveTo(BaseModel):
    """Cubic Bézier: two control points followed by the end point"""
    kind: Literal["curve_to"] = "curve_to"
    x1: float
    y1: float
    x2: float
    y2: float
    x: float
    y: float

class ClosePath(BaseModel):
    kind: Literal["close_path"] = "close_path"

PathSegment = Annotated[Union[MoveTo, LineTo, CurveTo, ClosePath], Field(discriminator="kind")]

# Scene nodes
class ViewBox(BaseModel):
    x: float = 0.0
    y: float = 0.0
    width: float
    height: float

class PathNode(BaseModel):
    kind: Literal["path"] = "path"
    id: Optional[str] = None
    segments: List[PathSegment] = Field(default_factory=list)
    fill: Optional[Fill] = None
    stroke: Optional[Stroke] = None
    transform: Transform = Field(default_factory=Transform)

class GroupNode(BaseModel):
    kind: Literal["group"] = "group"
    id: Optional[str] = None
    transform: Transform = Field(default_factory=Transform)
    children: List['SceneNode'] = Field(default_factory=list)

class RootNode(BaseModel):
    kind: Literal["root"] = "root"
    view_box: ViewBox
    children: List['SceneNode'] = Field(default_factory=list)

SceneNode = Annotated[Union[RootNode, GroupNode, PathNode], Field(discriminator="kind")]

GroupNode.model_rebuild()
RootNode.model_rebuild()

# Gradient definitions
class GradientStop(BaseModel):
    offset: float = Field(ge=0.0, le=1.0)
    color: RgbBytes
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)

class LinearGradient(BaseModel):
    """Axial gradient between (x1, y1) and (x2, y2) in the painted path's user space"""
    id: str
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 1.0
    y2: float = 0.0
    stops: List[GradientStop] = Field(default_factory=list)
    transform: Transform = Field(default_factory=Transform)

    def axis(self) -> Tuple[float, float, float, float]:
        return (self.x1, self.y1, self.x2, self.y2)

class SceneTree(BaseModel):
    """Read-only scene handed to the renderer, with gradient definitions by id"""
    root: RootNode
    definitions: Dict[str, LinearGradient] = Field(default_factory=dict)
    width: float
    height: float

    def find_gradient(self, gradient_id: str) -> Optional[LinearGradient]:
        return self.definitions.get(gradient_id)

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)
