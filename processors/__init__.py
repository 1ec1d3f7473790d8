"""
PDF Drawing Components

Stateful processors that turn vector scenes into content-stream operators:

- GraphicsStateStack: CTM and save/restore tracking with scoped q/Q emission
- Shading builders: axial shadings with stitched color functions
- SceneRenderer: scene graph to drawing operators
- SvgSceneLoader: SVG markup to scene graph

These differ from utils/ which contains pure, stateless functions.
"""

from processors.pdf_graphics import GraphicsStateStack, select_path_painting_operator
from processors.shading import build_shading, build_stitching_function
from processors.scene_renderer import SceneRenderer, RenderStats, render_scene
from processors.svg_scene_loader import SvgSceneLoader, load_svg

__version__ = "2.0.0"
__all__ = [
    'GraphicsStateStack',
    'select_path_painting_operator',
    'build_shading',
    'build_stitching_function',
    'SceneRenderer',
    'RenderStats',
    'render_scene',
    'SvgSceneLoader',
    'load_svg',
]
