# -------------------------------------------------------------
# @file          pipeline.py
# @author        Priyangkar Ghosh
# @created       2026-03-08
# @description   Ordered chain of nodes with change tracking and
#                the stage selection used for display
# @license       MIT
# -------------------------------------------------------------

import logging
logger = logging.getLogger(__name__)

import os
import time
from typing import Any, Iterator

from gips.backend import ShaderBackend
from gips.codegen import CodeGenerator
from gips.node import Node
from gips.target_pool import TargetPool


class Pipeline:
    """Nodes in display order.

    Stage numbers used by :attr:`show_index` are 1-based for nodes, stage 0
    is the unmodified input image. Invalid indices passed to the mutating
    operations are ignored and reported only through the return value.
    """

    def __init__(self, backend: ShaderBackend, generator: CodeGenerator | None = None) -> None:
        self._backend = backend
        self._generator = generator or CodeGenerator()
        self._pool = TargetPool(backend)
        self._nodes: list[Node] = []
        self._show_index = 0
        self._changed = True

        # last render
        self._source: Any = None
        self._size: tuple[int, int] = (0, 0)
        self._stages: list[Any] = []
        self._result: Any = None

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    @property
    def backend(self) -> ShaderBackend: return self._backend

    @property
    def nodes(self) -> tuple[Node, ...]: return tuple(self._nodes)

    @property
    def changed(self) -> bool: return self._changed

    @property
    def result(self) -> Any: return self._result

    def mark_changed(self) -> None:
        self._changed = True

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def stage(self, index: int) -> Any:
        # image after stage `index` of the last render, 0 is the input image
        return self._stages[index]

    # -- show index --------------------------------------------------

    @property
    def show_index(self) -> int:
        return self._show_index

    @show_index.setter
    def show_index(self, index: int) -> None:
        index = min(max(index, 0), len(self._nodes))
        if index != self._show_index:
            self._show_index = index
            self._changed = True

    # -- topology ----------------------------------------------------

    def insert(self, index: int, node: Node) -> bool:
        if not 0 <= index <= len(self._nodes): return False
        self._nodes.insert(index, node)
        node.on_change = self.mark_changed

        # stage `index` (the node before) stays, everything after moves up
        if self._show_index > index: self._show_index += 1
        self._changed = True
        logger.debug("Inserted node '%s' at %d", node.name, index)
        return True

    def remove(self, index: int) -> bool:
        if not 0 <= index < len(self._nodes): return False
        node = self._nodes.pop(index)
        node.on_change = None
        node.release()

        if self._show_index > index + 1: self._show_index -= 1
        self._show_index = min(self._show_index, len(self._nodes))
        self._changed = True
        logger.debug("Removed node '%s' from %d", node.name, index)
        return True

    def move(self, src: int, dst: int) -> bool:
        count = len(self._nodes)
        if not (0 <= src < count and 0 <= dst < count): return False
        if src == dst: return True
        self._nodes.insert(dst, self._nodes.pop(src))

        # keep showing the same node
        if (pos := self._show_index - 1) == src: self._show_index = dst + 1
        elif src < pos <= dst: self._show_index -= 1
        elif dst <= pos < src: self._show_index += 1
        self._changed = True
        logger.debug("Moved node from %d to %d", src, dst)
        return True

    def add_node(self, filename: str | os.PathLike, index: int | None = None) -> Node | None:
        # create, load and insert; the node is kept even if loading failed
        # -> its diagnostics are the way to find out what went wrong
        if index is None: index = len(self._nodes)
        if not 0 <= index <= len(self._nodes): return None
        node = Node(self._backend, filename, self._generator)
        node.load()
        self.insert(index, node)
        return node

    def reload(self, index: int) -> bool:
        if not 0 <= index < len(self._nodes): return False
        return self._nodes[index].reload()

    def toggle(self, index: int) -> bool:
        if not 0 <= index < len(self._nodes): return False
        self._nodes[index].toggle()
        return True

    def set_parameter(self, index: int, name: str, value: Any) -> bool:
        if not 0 <= index < len(self._nodes): return False
        if self._nodes[index].param(name) is None: return False
        self._nodes[index].set_parameter(name, value)
        return True

    # -- rendering ---------------------------------------------------

    def set_source(self, source: Any, width: int, height: int) -> None:
        if source is not self._source or (width, height) != self._size:
            self._source = source
            self._size = (width, height)
            self._changed = True

    def render(self, source: Any, width: int, height: int, show_index: int | None = None) -> Any:
        """Run all enabled nodes on ``source`` and return the image to display.

        Without any change since the previous call this returns the previous
        result without touching the GPU.
        """
        self.set_source(source, width, height)
        if show_index is not None: self.show_index = show_index
        if not self._changed and self._result is not None:
            return self._result

        t0 = time.perf_counter()
        self._pool.free_all()
        stages = [source]
        image = source
        for node in self._nodes:
            if node.enabled and node.loaded:
                target = node.render(image, width, height, self._pool)
                image = self._backend.target_image(target)
            stages.append(image)

        self._stages = stages
        self._result = stages[self._show_index]
        self._changed = False

        t1 = time.perf_counter()
        logger.debug("Rendered %d nodes in %.2f ms", len(self._nodes), (t1 - t0) * 1000)
        return self._result

    def release(self) -> None:
        for node in self._nodes:
            node.on_change = None
            node.release()
        self._nodes.clear()
        self._pool.clear()
        self._stages, self._result = [], None
        self._show_index = 0
        self._changed = True
