"""Document loaders — thin wrappers around LangChain document loaders."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

from langchain_community.document_loaders import (
    Docx2txtLoader,
    PyPDFLoader,
    TextLoader,
)

from docqa.exceptions import MissingFileError, UnsupportedFileTypeError

if TYPE_CHECKING:
    from langchain_core.documents import Document


def load_pdf(path: str | Path) -> list[Document]:
    """Load a PDF file, one document per page."""
    return PyPDFLoader(str(path)).load()


def load_docx(path: str | Path) -> list[Document]:
    """Load the raw text of a Word document as a single document."""
    return Docx2txtLoader(str(path)).load()


def load_text(path: str | Path) -> list[Document]:
    """Load a UTF-8 plain-text file as a single document."""
    return TextLoader(str(path), encoding="utf-8").load()


LOADERS: dict[str, Callable[[str | Path], list[Document]]] = {
    ".pdf": load_pdf,
    ".docx": load_docx,
    ".txt": load_text,
}

SUPPORTED_EXTENSIONS = frozenset(LOADERS)


def resolve_extension(filename: str) -> str:
    """Return the lower-cased extension of *filename*.

    Raises
    ------
    UnsupportedFileTypeError
        When no loader is registered for the extension.
    """
    extension = Path(filename).suffix.lower()
    if extension not in LOADERS:
        raise UnsupportedFileTypeError(extension)
    return extension


def load_document(path: str | Path, filename: str | None = None) -> list[Document]:
    """Extract page-scoped text segments from the file at *path*.

    Parameters
    ----------
    path:
        Location of the file on disk.
    filename:
        Name used to decide the file type.  Uploads are stored under a
        generated name, so callers pass the client's original filename;
        defaults to the name of *path*.

    Returns
    -------
    list[Document]
        One document per page for PDFs, a single document otherwise.
    """
    path = Path(path)
    extension = resolve_extension(filename or path.name)
    if not path.is_file():
        raise MissingFileError(f"File not found: {path}")
    return LOADERS[extension](path)
