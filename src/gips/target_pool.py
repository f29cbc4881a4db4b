import logging
from typing import Any

from gips.backend import ShaderBackend

logger = logging.getLogger(__name__)

class TargetPool:
    """Recycles render targets for intermediate images of one size."""

    def __init__(self, backend: ShaderBackend):
        self._backend = backend
        self._size: tuple[int, int] | None = None

        self._pool: list[Any] = []
        self._in_use: dict[int, Any] = {}

    @property
    def size(self) -> tuple[int, int] | None:
        return self._size

    @property
    def in_use(self) -> int:
        return len(self._in_use)

    def alloc_temp(self, width: int, height: int) -> Any:
        # a different image size invalidates every pooled target
        if self._size != (width, height):
            if self._in_use:
                raise RuntimeError("Cannot resize target pool while targets are in use")
            self.clear()
            self._size = (width, height)

        if self._pool:
            target = self._pool.pop()
            logger.debug("Reusing %dx%d target", width, height)
        else:
            target = self._backend.create_target(width, height)
            logger.info("Creating new %dx%d target", width, height)

        # track usage
        assert id(target) not in self._in_use
        self._in_use[id(target)] = target
        return target

    def free_temp(self, target: Any):
        if self._in_use.pop(id(target), None) is None:
            raise ValueError("Target was not tracked as in-use")
        self._pool.append(target)
        logger.debug("Returned target to pool (%d free)", len(self._pool))

    def free_all(self):
        self._pool.extend(self._in_use.values())
        self._in_use.clear()

    def clear(self):
        for target in self._pool: self._backend.release(target)
        for target in self._in_use.values(): self._backend.release(target)

        self._pool.clear()
        self._in_use.clear()
        self._size = None

        logger.info("Released all pooled render targets")
