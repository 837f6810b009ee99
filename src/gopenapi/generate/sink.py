"""Output sinks for the finished document."""

import json
import sys
from pathlib import Path
from typing import Protocol, TextIO

import yaml

from gopenapi.models.document import Document


class Sink(Protocol):
    def write(self, document: Document) -> None: ...


class _StreamSink:
    """Writes to a text stream and closes it afterwards, even on error.

    The target may also be a file path. The file is opened only once the
    document has been rendered, so a failed run never leaves a partial file.
    """

    def __init__(self, target: TextIO | Path):
        self.target = target
        self.stream: TextIO | None = None

    def write(self, document: Document) -> None:
        text = self.render(document.to_dict())
        self.stream = self.open()
        try:
            self.stream.write(text)
        finally:
            self.close()

    def open(self) -> TextIO:
        if isinstance(self.target, Path):
            return self.target.open("w", encoding="utf-8")
        return self.target

    def render(self, data: dict) -> str:
        raise NotImplementedError

    def close(self) -> None:
        # Never close the process's own stdout.
        if self.stream in (sys.stdout, sys.__stdout__):
            self.stream.flush()
        else:
            self.stream.close()


class JsonSink(_StreamSink):
    """Indented JSON."""

    def render(self, data: dict) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class YamlSink(_StreamSink):
    """Block-style YAML with 2-space indentation, keys in document order."""

    def render(self, data: dict) -> str:
        return yaml.safe_dump(data, indent=2, sort_keys=False, allow_unicode=True, default_flow_style=False)


SINKS: dict[str, type[_StreamSink]] = {
    "json": JsonSink,
    "yaml": YamlSink,
}


def resolve_sink(fmt: str, target: TextIO | Path) -> _StreamSink:
    """Pick the sink class for an output format name."""
    try:
        return SINKS[fmt](target)
    except KeyError:
        raise ValueError(f"unsupported output format: {fmt}") from None
