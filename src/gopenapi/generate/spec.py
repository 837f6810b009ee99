"""Spec generation pipeline: source tree -> declarations -> document -> sink."""

from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

from gopenapi.generate.sink import Sink
from gopenapi.interpret.assembler import DocumentAssembler
from gopenapi.models.document import Document
from gopenapi.source.base import Declaration
from gopenapi.source.golang import read_declarations
from gopenapi.source.walk import iter_source_files

DeclarationReader = Callable[[Path], list[Declaration]]


def generate_document(files: Iterable[Path], reader: DeclarationReader = read_declarations) -> Document:
    """Interpret every file in order and return the assembled document."""
    assembler = DocumentAssembler()
    count = 0
    for path in files:
        logger.debug("Interpreting {}", path)
        assembler.add_declarations(reader(path))
        count += 1

    document = assembler.document
    logger.info(
        "Interpreted {} files: {} paths, {} schemas, {} parameters",
        count,
        len(document.paths),
        len(document.components.schemas or {}),
        len(document.components.parameters or {}),
    )
    return document


def generate(root: Path, sink: Sink) -> Document:
    """Generate the document for the Go sources under ``root`` and write it to ``sink``."""
    document = generate_document(iter_source_files(root))
    sink.write(document)
    return document
