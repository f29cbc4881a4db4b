# -------------------------------------------------------------
# @file          node.py
# @author        Priyangkar Ghosh
# @created       2026-03-07
# @description   One filter unit: compiled passes, parameters
#                and the diagnostics of its last load
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

import os
import time
from typing import Any, Callable

from gips.backend import ShaderBackend
from gips.codegen import CodeGenerator, GenerationResult
from gips.constants import DIAG_PREFIX, MAX_PASSES
from gips.declarations import DeclarationRecognizer
from gips.parameter import Parameter
from gips.shader_pass import Pass
from gips.sources import display_name, load_source
from gips.target_pool import TargetPool


class Node:
    def __init__(self, backend: ShaderBackend, filename: str | os.PathLike, generator: CodeGenerator | None = None) -> None:
        self._backend = backend
        self._generator = generator or CodeGenerator()
        self._filename = str(filename)
        self._name = display_name(filename)

        # fixed arena of pass slots, only [0, pass_count) are active
        self._passes: list[Pass | None] = [None] * MAX_PASSES
        self._pass_count = 0
        self._params: list[Parameter] = []
        self._errors: list[str] = []
        self._sources: list[str | None] = [None] * MAX_PASSES
        self._enabled = True

        # called after every edit that changes what the node renders
        self.on_change: Callable[[], None] | None = None

    def __repr__(self) -> str:
        return f"Node({self._name!r}, passes={self._pass_count}, params={len(self._params)})"

    @property
    def filename(self) -> str: return self._filename

    @property
    def name(self) -> str: return self._name

    @property
    def pass_count(self) -> int: return self._pass_count

    @property
    def passes(self) -> tuple[Pass, ...]:
        return tuple(self._passes[:self._pass_count])

    @property
    def params(self) -> list[Parameter]: return self._params

    @property
    def sources(self) -> tuple[str | None, ...]:
        # generated fragment sources of the active passes (for inspection)
        return tuple(self._sources[:self._pass_count])

    @property
    def errors(self) -> str:
        return '\n'.join(self._errors)

    @property
    def enabled(self) -> bool: return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if (value := bool(value)) != self._enabled:
            self._enabled = value
            self._notify()

    def _notify(self) -> None:
        if self.on_change is not None: self.on_change()

    @property
    def loaded(self) -> bool:
        return self._pass_count > 0

    def param(self, name: str) -> Parameter | None:
        return next((p for p in self._params if p.name == name), None)

    def set_parameter(self, name: str, value: Any) -> bool:
        if (p := self.param(name)) is None:
            raise KeyError(f"Node '{self._name}' has no parameter '{name}'")
        if changed := p.set_value(value): self._notify()
        return changed

    def toggle(self) -> None:
        self.enabled = not self.enabled

    def load(self, filename: str | os.PathLike | None = None) -> bool:
        """Load (or reload) the node source and build its passes.

        A failed attempt never replaces a previously working set of passes;
        its diagnostics are reported through :attr:`errors` either way.
        """
        t0 = time.perf_counter()
        filename = str(filename) if filename is not None else self._filename
        logger.info("Starting build for %s...", filename)

        try:
            code = load_source(filename)
        except OSError as e:
            logger.error("Failed to read '%s': %s", filename, e)
            result = GenerationResult(fatal=True)
            result.diagnostics.append(f"{DIAG_PREFIX} cannot load '{filename}': {e}")
        else:
            scan = DeclarationRecognizer().scan(code)
            result = self._generator.generate(filename, code, scan, self._backend)

        self._commit(filename, result)
        self._notify()

        t1 = time.perf_counter()
        if self._errors:
            logger.warning("Node '%s' has %d diagnostics", self._name, len(self._errors))
        logger.info(
            "Node '%s' built in %.2f seconds with %d passes and %d parameters",
            self._name, t1 - t0, self._pass_count, len(self._params)
        )
        return not result.fatal and result.count > 0

    def reload(self) -> bool:
        return self.load()

    def _commit(self, filename: str, result: GenerationResult) -> None:
        self._errors = result.diagnostics

        # a failed attempt keeps the node running on its previous passes
        # -> everything this attempt created is released right away
        if result.fatal and self.loaded:
            logger.warning("Keeping previous passes of '%s'", self._name)
            result.release(self._backend)
            return

        # replacement is final, now the superseded programs can go
        self._release_passes()
        self._filename = filename
        self._name = display_name(filename)
        self._passes = result.passes
        self._sources = result.sources
        self._pass_count = result.count
        self._params = result.params

    def _release_passes(self) -> None:
        for p in self._passes:
            if p is not None: p.release(self._backend)
        self._passes = [None] * MAX_PASSES
        self._pass_count = 0

    def release(self) -> None:
        self._release_passes()
        self._params = []

    def render(self, source: Any, width: int, height: int, pool: TargetPool) -> Any | None:
        # run all passes, each one reading the previous pass' output
        # -> returns the target holding the final image (None without passes)
        image, target = source, None
        for p in self.passes:
            dst = pool.alloc_temp(width, height)
            p.run(self._backend, self._params, image, dst, width, height)
            if target is not None: pool.free_temp(target)
            target, image = dst, self._backend.target_image(dst)
        return target
