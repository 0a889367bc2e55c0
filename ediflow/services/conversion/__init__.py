"""XML wire-format conversion service package."""

from .xml_converter import ARRAY_ELEMENTS, NAMESPACE, XmlConverter

__all__ = ["ARRAY_ELEMENTS", "NAMESPACE", "XmlConverter"]
