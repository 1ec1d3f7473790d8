"""
Pydantic models for drawing primitives
Points, colors, line styles and affine transforms shared by layers and the scene renderer
"""

from enum import IntEnum
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field

from utils.pdf_transforms import (
    apply_matrix_transform, is_identity, multiply_matrices, scale_matrix, translation_matrix
)

MM_PER_PT = 25.4 / 72.0

class Point(BaseModel):
    """Position in points (1/72 inch), origin at the bottom-left of the page"""
    x: float
    y: float

    @classmethod
    def from_mm(cls, x_mm: float, y_mm: float) -> 'Point':
        return cls(x=x_mm / MM_PER_PT, y=y_mm / MM_PER_PT)

class Rgb(BaseModel):
    """RGB color with components in [0, 1]"""
    type: Literal["rgb"] = "rgb"
    r: float = Field(ge=0.0, le=1.0)
    g: float = Field(ge=0.0, le=1.0)
    b: float = Field(ge=0.0, le=1.0)

    @classmethod
    def from_bytes(cls, r: int, g: int, b: int) -> 'Rgb':
        return cls(r=r / 255.0, g=g / 255.0, b=b / 255.0)

    def components(self) -> List[float]:
        return [self.r, self.g, self.b]

class Cmyk(BaseModel):
    type: Literal["cmyk"] = "cmyk"
    c: float = Field(ge=0.0, le=1.0)
    m: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)
    k: float = Field(ge=0.0, le=1.0)

    def components(self) -> List[float]:
        return [self.c, self.m, self.y, self.k]

class Greyscale(BaseModel):
    type: Literal["greyscale"] = "greyscale"
    g: float = Field(ge=0.0, le=1.0)

    def components(self) -> List[float]:
        return [self.g]

Color = Union[Rgb, Cmyk, Greyscale]

class LineCapStyle(IntEnum):
    """Values written by the J operator"""
    BUTT = 0
    ROUND = 1
    PROJECTING_SQUARE = 2

class LineJoinStyle(IntEnum):
    """Values written by the j operator"""
    MITER = 0
    ROUND = 1
    BEVEL = 2

class LineDashPattern(BaseModel):
    """
    Dash pattern as up to three dash/gap pairs.
    Pairs are flattened in order and the first missing value ends the array.
    """
    offset: float = 0.0
    dash_1: Optional[float] = None
    gap_1: Optional[float] = None
    dash_2: Optional[float] = None
    gap_2: Optional[float] = None
    dash_3: Optional[float] = None
    gap_3: Optional[float] = None

    def dash_array(self) -> List[float]:
        values = []
        for value in (self.dash_1, self.gap_1, self.dash_2, self.gap_2, self.dash_3, self.gap_3):
            if value is None:
                break
            values.append(value)
        return values

    @classmethod
    def solid(cls) -> 'LineDashPattern':
        return cls()

class Outline(BaseModel):
    """Stroke color and thickness applied together"""
    color: Color
    thickness: float = 1.0

class Transform(BaseModel):
    """Affine matrix [a b c d e f] with cm semantics: x' = a*x + c*y + e, y' = b*x + d*y + f"""
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> 'Transform':
        return cls()

    @classmethod
    def from_list(cls, values) -> 'Transform':
        a, b, c, d, e, f = [float(v) for v in values]
        return cls(a=a, b=b, c=c, d=d, e=e, f=f)

    @classmethod
    def translate(cls, tx: float, ty: float) -> 'Transform':
        return cls.from_list(translation_matrix(tx, ty))

    @classmethod
    def scale(cls, sx: float, sy: float) -> 'Transform':
        return cls.from_list(scale_matrix(sx, sy))

    def multiply(self, inner: 'Transform') -> 'Transform':
        """Matrix equivalent to applying ``self`` with cm and then ``inner``."""
        return Transform.from_list(multiply_matrices(self.as_list(), inner.as_list()))

    def as_list(self) -> List[float]:
        return [self.a, self.b, self.c, self.d, self.e, self.f]

    def as_tuple(self) -> Tuple[float, ...]:
        return tuple(self.as_list())

    def is_identity(self) -> bool:
        return is_identity(self.as_list())

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return apply_matrix_transform(x, y, self.as_list())
