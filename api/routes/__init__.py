"""Route handlers following Single Responsibility Principle

Each router module handles a single resource/concept:
- health: API info and health check
- entity / entities: single entity lookup and entity listing
- file / files: file content and file listing
- crate: RO-Crate metadata documents
- search: search across entities
"""
