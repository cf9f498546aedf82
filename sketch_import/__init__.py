# =============================================================================
# Sketch Import Library
# =============================================================================
# Converts shapefile features into sketch records for the MongoDB ledger.
# See individual sub-packages for detailed documentation.
# =============================================================================

"""
Shapefile to sketch importer.

Sub-packages:
- models: Pydantic data models and settings
- spatial_utils: Projection checks and Esri JSON geometry conversion
- resources: MongoDB persistence resource
"""

__version__ = "0.1.0"
