"""
SERVICES LAYER CONTRACT

This package contains the entity mapping services.

RULES:
- Implements query building, entity loading and repositories
- Depends on core abstractions (metadata, interfaces, exceptions)
- Talks to the database only through the IDatabaseHandle contract

LAYER RESPONSIBILITY:
- SQL construction with escaped identifiers and values
- Row hydration onto entity instances
- Repository and entity manager facades
"""
