"""Data models for Stencil."""
from stencil.models.actions import Action, FileOperation
from stencil.models.paths import ChildPath
from stencil.models.repository import MergeAnalysis, RepositoryLocation, Signature

__all__ = [
    'Action',
    'ChildPath',
    'FileOperation',
    'MergeAnalysis',
    'RepositoryLocation',
    'Signature',
]
