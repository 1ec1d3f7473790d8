"""
PDF Operator Constants

Content stream operators emitted by the scene renderer and the layer
drawing primitives, grouped by functional category.

Reference: PDF 32000-1:2008 specification, Appendix A
"""

# ==============================================================================
# Graphics State Operators (PDF spec 8.4.4)
# ==============================================================================
OP_SAVE_STATE = b'q'                 # Save graphics state
OP_RESTORE_STATE = b'Q'              # Restore graphics state
OP_CTM = b'cm'                       # Modify current transformation matrix
OP_SET_LINE_WIDTH = b'w'             # Set line width
OP_SET_LINE_CAP = b'J'               # Set line cap style
OP_SET_LINE_JOIN = b'j'              # Set line join style
OP_SET_MITER_LIMIT = b'M'            # Set miter limit
OP_SET_DASH = b'd'                   # Set line dash pattern
OP_SET_GRAPHICS_STATE_PARAMS = b'gs' # Set parameters from graphics state parameter dict

# ==============================================================================
# Color Operators (PDF spec 8.6.8)
# ==============================================================================
# Stroke
OP_SET_GRAY_STROKE = b'G'            # Set Gray color for stroking
OP_SET_RGB_COLOR_STROKE = b'RG'      # Set RGB color for stroking
OP_SET_CMYK_COLOR_STROKE = b'K'      # Set CMYK color for stroking

# Fill (Non-Stroke)
OP_SET_GRAY_FILL = b'g'              # Set Gray color for non-stroking
OP_SET_RGB_COLOR_FILL = b'rg'        # Set RGB color for non-stroking
OP_SET_CMYK_COLOR_FILL = b'k'        # Set CMYK color for non-stroking

# ==============================================================================
# Text Operators (PDF spec 9.3, 9.4)
# ==============================================================================
OP_BEGIN_TEXT = b'BT'            # Begin text object
OP_END_TEXT = b'ET'              # End text object
OP_SET_FONT = b'Tf'              # Set text font and size
OP_MOVE_TEXT = b'Td'             # Move text position
OP_SHOW_TEXT = b'Tj'             # Show a text string

# ==============================================================================
# Path Construction Operators (PDF spec 8.5.2)
# ==============================================================================
OP_MOVETO = b'm'          # Begin new subpath (moveto)
OP_LINETO = b'l'          # Append straight line segment (lineto)
OP_CURVETO = b'c'         # Append cubic Bézier curve
OP_CURVETO_Y = b'y'       # Append cubic Bézier curve (final point replicated)
OP_CLOSEPATH = b'h'       # Close current subpath

# ==============================================================================
# Path Painting Operators (PDF spec 8.5.3)
# ==============================================================================
OP_STROKE = b'S'
OP_CLOSE_STROKE = b's'
OP_FILL = b'f'
OP_FILL_EVEN_ODD = b'f*'
OP_FILL_STROKE = b'B'
OP_FILL_STROKE_EVEN_ODD = b'B*'
OP_CLOSE_FILL_STROKE = b'b'
OP_CLOSE_FILL_STROKE_EVEN_ODD = b'b*'
OP_END_PATH = b'n'

# Even-odd counterpart of each nonzero-winding painting operator
EVEN_ODD_VARIANTS = {
    OP_FILL: OP_FILL_EVEN_ODD,
    OP_FILL_STROKE: OP_FILL_STROKE_EVEN_ODD,
    OP_CLOSE_FILL_STROKE: OP_CLOSE_FILL_STROKE_EVEN_ODD,
}

# ==============================================================================
# Clipping Path Operators (PDF spec 8.5.4)
# ==============================================================================
OP_CLIP = b'W'            # Set clipping path using nonzero winding number rule
OP_CLIP_EVEN_ODD = b'W*'  # Set clipping path using even-odd rule

# ==============================================================================
# Shading Operators (PDF spec 8.7.4)
# ==============================================================================
OP_SHADING = b'sh'    # Paint area with shading pattern

# ==============================================================================
# Marked Content Operators (PDF spec 10.5)
# ==============================================================================
OP_BDC = b'BDC'  # Begin marked-content sequence with property list
OP_EMC = b'EMC'  # End marked-content sequence
