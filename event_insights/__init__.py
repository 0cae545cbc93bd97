"""
Event Insights Backend Package.

FastAPI service layer for event performance analytics. Turns an event's
pre-aggregated metrics into a ranked list of anomaly, trend and peer
benchmark insights with confidence scores and priority levels.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and error taxonomy
    - models: Pydantic schemas and enums
    - services: Insights Engine, detectors and record source
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
