"""
Segment Compass Package.

Segmentation and movement analytics engine for satisfaction/loyalty survey
data, with a FastAPI service layer.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Business logic services
"""

__version__ = "1.0.0"
