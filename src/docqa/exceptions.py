"""Error taxonomy shared by the ingestion, answering and serving layers.

Two families:

* :class:`ClientError` — the request itself is unusable (missing file,
  unsupported type, empty field).  Raised before any external call is
  made and mapped to HTTP 400.
* :class:`ProcessingError` — an external collaborator (loader, embedder,
  vector store, chat model) failed.  Mapped to HTTP 500 and carries the
  underlying error text in ``details``.
"""

from __future__ import annotations


class DocQAError(Exception):
    """Base class for all docqa errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ClientError(DocQAError):
    """Invalid or incomplete input."""

    status_code = 400


class MissingFileError(ClientError):
    """No file was supplied, or the supplied path does not exist."""


class UnsupportedFileTypeError(ClientError):
    """The file extension has no registered loader."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"Unsupported file type: {extension or '(none)'}")


class MissingFieldError(ClientError):
    """A required request field is absent or blank."""


class ProcessingError(DocQAError):
    """An external call or processing step failed."""

    def __init__(self, message: str, details: str = "") -> None:
        self.details = details
        super().__init__(message)


class IngestionError(ProcessingError):
    """Loading, splitting, embedding or upserting an upload failed."""

    def __init__(self, details: str, document_id: str | None = None) -> None:
        self.document_id = document_id
        super().__init__("Error processing file", details)


class RetrievalError(ProcessingError):
    """Embedding the question or querying the vector store failed."""

    def __init__(self, details: str) -> None:
        super().__init__("Error processing query", details)


class AnswerGenerationError(ProcessingError):
    """The chat model invocation failed."""

    def __init__(self, details: str) -> None:
        super().__init__("Error processing query", details)
