"""
PDF Dictionary Keys and Name Constants
"""

# Resource Dictionary Keys
KEY_RESOURCES = "/Resources"
KEY_EXT_GSTATE = "/ExtGState"
KEY_SHADING = "/Shading"
KEY_FONT = "/Font"
KEY_PROPERTIES = "/Properties"

# Resource name prefixes, one per category
RESOURCE_NAME_PREFIX = {
    KEY_EXT_GSTATE: "GS",
    KEY_SHADING: "SH",
    KEY_PROPERTIES: "MC",
}

# Object Types and Subtypes
KEY_TYPE = "/Type"
KEY_SUBTYPE = "/Subtype"
VAL_CATALOG = "/Catalog"
VAL_PAGES = "/Pages"
VAL_PAGE = "/Page"
VAL_OCG = "/OCG"
VAL_EXT_GSTATE = "/ExtGState"
VAL_METADATA = "/Metadata"
VAL_XML = "/XML"
VAL_FONT = "/Font"
VAL_FONT_DESCRIPTOR = "/FontDescriptor"
VAL_OUTPUT_INTENT = "/OutputIntent"

# Catalog
KEY_PAGES = "/Pages"
KEY_PAGE_LAYOUT = "/PageLayout"
KEY_PAGE_MODE = "/PageMode"
KEY_OC_PROPERTIES = "/OCProperties"
KEY_OUTPUT_INTENTS = "/OutputIntents"
KEY_METADATA = "/Metadata"
VAL_ONE_COLUMN = "/OneColumn"
VAL_USE_NONE = "/UseNone"

# Page tree
KEY_KIDS = "/Kids"
KEY_COUNT = "/Count"
KEY_PARENT = "/Parent"
KEY_MEDIA_BOX = "/MediaBox"
KEY_TRIM_BOX = "/TrimBox"
KEY_CROP_BOX = "/CropBox"
KEY_ROTATE = "/Rotate"
KEY_CONTENTS = "/Contents"

# Optional content
KEY_OCGS = "/OCGs"
KEY_DEFAULT_CONFIG = "/D"
KEY_ORDER = "/Order"
KEY_ON = "/ON"
KEY_RB_GROUPS = "/RBGroups"
KEY_NAME = "/Name"
KEY_INTENT = "/Intent"
KEY_USAGE = "/Usage"
KEY_CREATOR_INFO = "/CreatorInfo"
KEY_CREATOR = "/Creator"
VAL_VIEW = "/View"
VAL_DESIGN = "/Design"
VAL_ARTWORK = "/Artwork"
VAL_OC = "/OC"

# Trailer / Info
KEY_INFO = "/Info"
KEY_ID = "/ID"
KEY_TITLE = "/Title"
KEY_PRODUCER = "/Producer"
KEY_KEYWORDS = "/Keywords"
KEY_TRAPPED = "/Trapped"
KEY_CREATION_DATE = "/CreationDate"
KEY_MOD_DATE = "/ModDate"
KEY_PDFX_VERSION = "/GTS_PDFXVersion"
VAL_TRUE = "/True"
VAL_FALSE = "/False"

# Output intents
KEY_S = "/S"
KEY_OUTPUT_CONDITION = "/OutputCondition"
KEY_OUTPUT_CONDITION_IDENTIFIER = "/OutputConditionIdentifier"
KEY_REGISTRY_NAME = "/RegistryName"
KEY_INFO_STRING = "/Info"
KEY_DEST_OUTPUT_PROFILE = "/DestOutputProfile"
VAL_GTS_PDFX = "/GTS_PDFX"
VAL_GTS_PDFA1 = "/GTS_PDFA1"

# Graphics State Parameter Keys (ExtGState)
KEY_FILL_OPACITY = "/ca"         # Non-stroking alpha constant
KEY_STROKE_OPACITY = "/CA"       # Stroking alpha constant

# Shading and Function Keys
KEY_SHADING_TYPE = "/ShadingType"
KEY_COLOR_SPACE = "/ColorSpace"
KEY_COORDS = "/Coords"
KEY_EXTEND = "/Extend"
KEY_DOMAIN = "/Domain"
KEY_FUNCTION = "/Function"
KEY_FUNCTION_TYPE = "/FunctionType"
KEY_FUNCTIONS = "/Functions"
KEY_BOUNDS = "/Bounds"
KEY_ENCODE = "/Encode"
KEY_C0 = "/C0"
KEY_C1 = "/C1"
KEY_N = "/N"
VAL_DEVICE_RGB = "/DeviceRGB"

SHADING_TYPE_AXIAL = 2
FUNCTION_TYPE_EXPONENTIAL = 2
FUNCTION_TYPE_STITCHING = 3

# Font dictionary keys
KEY_BASE_FONT = "/BaseFont"
KEY_ENCODING = "/Encoding"
KEY_FIRST_CHAR = "/FirstChar"
KEY_LAST_CHAR = "/LastChar"
KEY_WIDTHS = "/Widths"
KEY_FONT_DESCRIPTOR = "/FontDescriptor"
KEY_FONT_NAME = "/FontName"
KEY_FLAGS = "/Flags"
KEY_FONT_BBOX = "/FontBBox"
KEY_ITALIC_ANGLE = "/ItalicAngle"
KEY_ASCENT = "/Ascent"
KEY_DESCENT = "/Descent"
KEY_CAP_HEIGHT = "/CapHeight"
KEY_STEM_V = "/StemV"
KEY_FONT_FILE2 = "/FontFile2"
KEY_FONT_FILE3 = "/FontFile3"
VAL_TYPE1 = "/Type1"
VAL_TRUE_TYPE = "/TrueType"
VAL_OPEN_TYPE = "/OpenType"
VAL_WIN_ANSI_ENCODING = "/WinAnsiEncoding"
