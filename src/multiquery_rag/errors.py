class RagError(Exception):
    """Base class for errors raised by multiquery_rag."""


class ConfigurationError(RagError):
    """A required credential, file, or dataset is missing or unreadable."""


class IndexingError(RagError):
    """Embedding or upserting source chunks failed during startup indexing."""
