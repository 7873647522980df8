"""Pipeline error taxonomy."""


class PipelineError(Exception):
    """Base class for pipeline errors."""


class IngestionError(PipelineError):
    """Batch ingestion failed; the previous index is left in place."""


class NoDocumentsFound(IngestionError):
    """No documents were found to index."""


class IndexLoadError(PipelineError):
    """Persisted index is unavailable or malformed."""


class RetrievalError(PipelineError):
    """A single candidate could not be fetched."""


class GenerationError(PipelineError):
    """The answer generator failed."""
