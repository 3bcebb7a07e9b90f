"""Git-backed template retrieval."""
from stencil.services.git.config_reader import GitConfigReader, resolve_tool
from stencil.services.git.merge import MergeEngine
from stencil.services.git.retriever import TemplateRetriever, retrieve
from stencil.services.git.runner import GitRunner

__all__ = [
    "GitConfigReader",
    "GitRunner",
    "MergeEngine",
    "TemplateRetriever",
    "resolve_tool",
    "retrieve",
]
