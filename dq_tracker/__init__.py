"""
Data Quality Tracker Backend Package.

FastAPI service layer for logging, categorizing and monitoring data quality
issues against named datasets. Persistence lives in a hosted PostgreSQL
database and authentication is delegated to the hosted identity service.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database handle, identity client, errors, dependencies
    - middleware: Rate limiting and security headers
    - models: Pydantic schemas and enums
    - services: Validation, issue repository, aggregation and CSV export
    - sql: Parameterized SQL queries and reference DDL
"""

__version__ = "1.0.0"
