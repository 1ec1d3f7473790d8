"""
Pydantic models for document-level settings
Conformance levels and color profiles referenced by the document metadata
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

class PdfConformance(str, Enum):
    """Conformance level written to the Info dictionary and XMP packet"""
    A1B_2005_PDF_1_4 = "PDF/A-1b:2005"
    A2B_PDF_1_7 = "PDF/A-2b"
    X1A_2001_PDF_1_3 = "PDF/X-1a:2001"
    X3_2002_PDF_1_3 = "PDF/X-3:2002"
    X3_2003_PDF_1_4 = "PDF/X-3:2003"
    X4 = "PDF/X-4"
    CUSTOM = "custom"

    @property
    def is_pdf_x(self) -> bool:
        return self.value.startswith("PDF/X")

    @property
    def is_pdf_a(self) -> bool:
        return self.value.startswith("PDF/A")

    @property
    def requires_icc_profile(self) -> bool:
        return self is not PdfConformance.CUSTOM

    @property
    def requires_xmp_metadata(self) -> bool:
        return self is not PdfConformance.CUSTOM

    @property
    def pdf_version(self) -> str:
        return {
            PdfConformance.A1B_2005_PDF_1_4: "1.4",
            PdfConformance.A2B_PDF_1_7: "1.7",
            PdfConformance.X1A_2001_PDF_1_3: "1.3",
            PdfConformance.X3_2002_PDF_1_3: "1.3",
            PdfConformance.X3_2003_PDF_1_4: "1.4",
            PdfConformance.X4: "1.6",
        }.get(self, "1.3")

class IccProfileType(str, Enum):
    CMYK = "cmyk"
    RGB = "rgb"
    GREYSCALE = "greyscale"

    @property
    def component_count(self) -> int:
        return {IccProfileType.CMYK: 4, IccProfileType.RGB: 3, IccProfileType.GREYSCALE: 1}[self]

    @property
    def alternate(self) -> str:
        return {
            IccProfileType.CMYK: "/DeviceCMYK",
            IccProfileType.RGB: "/DeviceRGB",
            IccProfileType.GREYSCALE: "/DeviceGray",
        }[self]

class IccProfile(BaseModel):
    """Embedded ICC profile used as the output intent"""
    data: bytes
    profile_type: IccProfileType = IccProfileType.CMYK
    output_condition: str = "Commercial and specialty printing"
    output_condition_identifier: str = "FOGRA39"
    registry_name: str = "http://www.color.org"
    info: str = "Coated FOGRA39 (ISO 12647-2:2004)"
    description: Optional[str] = None
