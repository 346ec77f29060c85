"""handbook-pdf: render multi-section handbook pages into a single PDF."""

__version__ = "0.1.0"
