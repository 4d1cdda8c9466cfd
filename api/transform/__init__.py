"""Transformation pipeline for API responses.

Every record goes through three ordered stages:
- base: strip store-only fields, expose the public shape (Standard*)
- access: mandatory, caller-supplied, adds the access block (Authorised*)
- extras: optional, caller-supplied enrichment, applied in order
"""

from .base import base_entity_transformer, base_file_transformer
from .access import all_public_access_transformer, all_public_file_access_transformer
from .pipeline import TransformPipeline, compose, entity_pipeline, file_pipeline

__all__ = [
    'base_entity_transformer', 'base_file_transformer',
    'all_public_access_transformer', 'all_public_file_access_transformer',
    'TransformPipeline', 'compose', 'entity_pipeline', 'file_pipeline',
]
