"""Service packages: detection, extraction, mapping, conversion, validation and messaging."""
