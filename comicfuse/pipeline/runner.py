from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from comicfuse.pipeline.adapter import Adapter, AsyncAdapter
from comicfuse.pipeline.convert import GrayColorizer

S = TypeVar("S")
D = TypeVar("D")

Stage = Union[Adapter[Any, Any], AsyncAdapter[Any, Any]]

logger = logging.getLogger(__name__)


def _log_step(pipeline: str, index: int, stage: Stage, t0: float) -> None:
    logger.info(
        "pipeline_step",
        extra={
            "pipeline": pipeline,
            "step": index,
            "stage": stage.name,
            "ms": int((time.perf_counter() - t0) * 1000),
        },
    )


def _log_failure(pipeline: str, index: int, stage: Stage) -> None:
    logger.exception(
        "pipeline_step_failed",
        extra={"pipeline": pipeline, "step": index, "stage": stage.name},
    )


class Pipeline(Generic[S, D]):
    """Runs synchronous stages one after another, feeding each output forward.

    The first failing stage aborts the run; its exception reaches the caller
    unchanged and no later stage is invoked.
    """

    def __init__(self, stages: Sequence[Adapter[Any, Any]], name: str = "pipeline") -> None:
        self.stages: Tuple[Adapter[Any, Any], ...] = tuple(stages)
        self.name = name

    @staticmethod
    def builder(name: str = "pipeline") -> "PipelineBuilder[Any, Any]":
        return PipelineBuilder(name=name)

    def run(self, src: S) -> D:
        output: Any = src
        for index, stage in enumerate(self.stages):
            t0 = time.perf_counter()
            try:
                output = stage.convert(output)
            except Exception:
                _log_failure(self.name, index, stage)
                raise
            _log_step(self.name, index, stage, t0)
        return output


class AsyncPipeline(Generic[S, D]):
    """Async counterpart of :class:`Pipeline`.

    Each stage is awaited to completion before the next one starts; stages
    never overlap. Plain :class:`Adapter` stages run inline on the loop.
    """

    def __init__(self, stages: Sequence[Stage], name: str = "pipeline") -> None:
        self.stages: Tuple[Stage, ...] = tuple(stages)
        self.name = name

    @staticmethod
    def builder(name: str = "pipeline") -> "AsyncPipelineBuilder[Any, Any]":
        return AsyncPipelineBuilder(name=name)

    async def run(self, src: S) -> D:
        output: Any = src
        for index, stage in enumerate(self.stages):
            t0 = time.perf_counter()
            try:
                result = stage.convert(output)
                if inspect.isawaitable(result):
                    result = await result
                output = result
            except Exception:
                _log_failure(self.name, index, stage)
                raise
            _log_step(self.name, index, stage, t0)
        return output


class _BuilderBase:
    def __init__(self, stages: Optional[List[Stage]] = None, name: str = "pipeline") -> None:
        self._stages: List[Stage] = list(stages or [])
        self._name = name

    def _append(self, stage: Stage) -> None:
        if not isinstance(stage, (Adapter, AsyncAdapter)):
            raise TypeError(f"pipeline stages must be Adapter or AsyncAdapter, got {type(stage).__name__}")
        self._stages.append(stage)


# Stages run in exactly the order they are added.
class PipelineBuilder(_BuilderBase, Generic[S, D]):
    def add(self, stage: Adapter[Any, Any]) -> "PipelineBuilder[S, D]":
        if isinstance(stage, AsyncAdapter):
            raise TypeError("async stages require AsyncPipeline.builder()")
        self._append(stage)
        return self

    def splitter(self, splitter: Adapter[Any, Any]) -> "PipelineBuilder[S, D]":
        """Append a panel splitter, preceded by the grayscale conversion it requires."""
        return self.add(GrayColorizer()).add(splitter)

    def build(self) -> Pipeline[S, D]:
        return Pipeline(list(self._stages), name=self._name)  # type: ignore[arg-type]


class AsyncPipelineBuilder(_BuilderBase, Generic[S, D]):
    def add(self, stage: Stage) -> "AsyncPipelineBuilder[S, D]":
        self._append(stage)
        return self

    def splitter(self, splitter: Adapter[Any, Any]) -> "AsyncPipelineBuilder[S, D]":
        """Append a panel splitter, preceded by the grayscale conversion it requires."""
        return self.add(GrayColorizer()).add(splitter)

    def build(self) -> AsyncPipeline[S, D]:
        return AsyncPipeline(list(self._stages), name=self._name)
