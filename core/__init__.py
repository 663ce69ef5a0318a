"""
CORE LAYER CONTRACT

This package contains core components and abstractions of the entity mapper.

RULES:
- Contains fundamental building blocks for all layers
- Defines base classes, interfaces, and abstractions
- No SQL construction or repository logic

LAYER RESPONSIBILITY:
- EntityMapperError hierarchy
- Database connection management
- Entity declaration and metadata resolution
- Collaborator interfaces (database handle, cache, persistable entity)

CROSS-LAYER RESTRICTIONS:
- No imports from services, except in core.dependency_injection
- Only core abstractions and interfaces

If you need SQL building or hydration, you are in the wrong layer.
"""
