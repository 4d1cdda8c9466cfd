"""Operations layer for the catalogue API.

This package handles request-processing operations:
- Parent reference resolution (ReferenceResolver)
- Entity/file listings (EntityLister, FileLister)
- Search compilation and execution (SearchQueryCompiler, SearchExecutor)
- Content delivery (ContentDeliveryNegotiator)

Principles:
- Single Responsibility Principle
- Dependency Injection
"""
