from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Callable

from . import fmt
from .config import Settings, load_settings
from .description import Description
from .errors import FileIOError, GogenError
from .extract import extract_description
from .render import default_functions, render
from .resolver import ResolvedDecl, resolve_declaration
from .tags import DEFAULT_TAG_KEY

logger = logging.getLogger(__name__)


@dataclass
class Generator:
    """One code generation run. Call `run()` to execute it.

    `dir=None` skips source resolution; the template then only sees the name.
    Output goes to `writer` if set, else to the `output` path, else to stdout.
    """

    name: str
    dir: str | Path | None = None
    template: str | None = None
    template_file: str | Path | None = None
    output: str | Path | None = None
    writer: IO[str] | None = None
    format: bool = False
    tag_key: str = DEFAULT_TAG_KEY
    functions: dict[str, Callable[..., Any]] = field(default_factory=default_functions)
    settings: Settings = field(default_factory=load_settings)

    _resolved: ResolvedDecl | None = field(default=None, init=False, repr=False)
    _desc: Description | None = field(default=None, init=False, repr=False)
    _out: str = field(default="", init=False, repr=False)

    def run(self) -> None:
        logger.info("Generating code for %s", self.name)
        for stage in (
            self.parse_source,
            self.prepare_description,
            self.load_template,
            self.execute_template,
            self.format_source,
            self.write_output,
        ):
            stage()

    @property
    def description(self) -> Description | None:
        return self._desc

    def parse_source(self) -> None:
        if self.dir is None:
            return
        self._resolved = resolve_declaration(self.dir, self.name, settings=self.settings)

    def prepare_description(self) -> None:
        self._desc = extract_description(self.name, self._resolved, tag_key=self.tag_key)

    def load_template(self) -> None:
        if self.template is not None:
            return
        if self.template_file is None:
            raise GogenError("either template or template_file is required")
        try:
            self.template = Path(self.template_file).read_text(encoding="utf-8")
        except OSError as e:
            raise FileIOError(f"failed to read template {self.template_file}: {e}") from e

    def execute_template(self) -> None:
        if self._desc is None or self.template is None:
            raise GogenError("prepare_description and load_template must run before execute_template")
        self._out = render(self.template, self._desc, functions=self.functions)

    def format_source(self) -> None:
        if not self.format:
            return
        self._out = fmt.format_source(
            str(self.output) if self.output else None,
            self._out,
            settings=self.settings,
        )

    def write_output(self) -> None:
        try:
            if self.writer is not None:
                self.writer.write(self._out)
                return
            if not self.output:
                sys.stdout.write(self._out)
                return
            logger.info("Writing %s", self.output)
            Path(self.output).write_text(self._out, encoding="utf-8")
        except OSError as e:
            raise FileIOError(f"failed to write output {self.output or '<stdout>'}: {e}") from e
