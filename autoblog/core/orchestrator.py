"""
Batch orchestration: run attempts until enough posts are published.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import tqdm

from autoblog.core.errors import AutoblogError, BatchExhaustedError, QualityGateError
from autoblog.core.models import BatchState, QualityReport

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_ATTEMPT_MULTIPLIER = 3


class Stage(str, Enum):
    """Lifecycle of a single attempt."""
    IDLE = 'idle'
    PLANNING = 'planning'
    RESEARCHING = 'researching'
    DRAFTING = 'drafting'
    GATING = 'gating'
    PUBLISHING = 'publishing'
    SUCCEEDED = 'succeeded'
    ATTEMPT_FAILED = 'attempt_failed'
    EXHAUSTED = 'exhausted'


@dataclass
class AttemptResult:
    attempt: int
    stage: Stage
    title: Optional[str] = None
    report: Optional[QualityReport] = None
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.stage == Stage.SUCCEEDED


class BatchOrchestrator:
    """
    Drives plan -> research -> draft -> gate -> publish under an attempt budget.

    Attempts run one after another. A title is excluded from later planning
    as soon as it has been planned, whatever the attempt's outcome.
    """
    def __init__(self, planner, researcher, writer, gate, library, store=None,
                 attempt_multiplier: int = DEFAULT_ATTEMPT_MULTIPLIER, progress: bool = False):
        """
        Initialize the orchestrator.

        Args:
            planner: TopicPlanner
            researcher: Researcher
            writer: ArticleWriter
            gate: QualityGate
            library: PostLibrary used for the duplication corpus and publication
            store: Optional StateStore receiving each stage's output
            attempt_multiplier: Attempts allowed per requested post
            progress: Show a tqdm progress bar
        """
        self.planner = planner
        self.researcher = researcher
        self.writer = writer
        self.gate = gate
        self.library = library
        self.store = store
        self.attempt_multiplier = max(1, int(attempt_multiplier))
        self.progress = progress
        self.stage = Stage.IDLE

    def _enter(self, stage: Stage, attempt: int) -> None:
        logger.debug(f"Attempt {attempt}: {self.stage.value} -> {stage.value}")
        self.stage = stage

    def _save(self, key: str, value) -> None:
        if self.store is not None:
            self.store.write_json(key, value)

    async def run_attempt(self, state: BatchState) -> AttemptResult:
        """
        Run one attempt through every stage.

        Args:
            state: Batch bookkeeping; ``excluded_titles`` is updated in place

        Returns:
            AttemptResult describing where the attempt ended
        """
        attempt = state.attempt
        result = AttemptResult(attempt=attempt, stage=Stage.PLANNING)

        try:
            self._enter(Stage.PLANNING, attempt)
            selection = await self.planner.plan(set(state.excluded_titles))
            result.title = selection.selected.title
            state.excluded_titles.add(result.title)
            self._save('topic', selection.to_dict())

            self._enter(Stage.RESEARCHING, attempt)
            bundle = await self.researcher.research(selection)
            self._save('research', bundle.to_dict())

            self._enter(Stage.DRAFTING, attempt)
            article = await self.writer.write(bundle)
            self._save('article', article.to_dict())

            self._enter(Stage.GATING, attempt)
            report = await self.gate.evaluate(article, self.library.documents())
            result.report = report
            self._save('quality', report.to_dict())
            if not report.passed:
                raise QualityGateError(report)

            self._enter(Stage.PUBLISHING, attempt)
            result.path = self.library.publish(article, report)
        except AutoblogError as e:
            result.stage = self.stage
            result.error = str(e)
            self._enter(Stage.ATTEMPT_FAILED, attempt)
            logger.warning(f"Attempt {attempt} failed during {result.stage.value}: {e}")
            return result

        self._enter(Stage.SUCCEEDED, attempt)
        result.stage = Stage.SUCCEEDED
        return result

    async def run(self, target_count: int) -> BatchState:
        """
        Publish ``target_count`` posts within ``target_count * attempt_multiplier`` attempts.

        Args:
            target_count: Number of posts to publish

        Returns:
            Final BatchState

        Raises:
            BatchExhaustedError: if the budget ran out first
        """
        target_count = max(0, int(target_count))
        state = BatchState(
            target_count=target_count,
            max_attempts=target_count * self.attempt_multiplier,
        )

        with tqdm.tqdm(total=target_count, desc="Publishing posts", disable=not self.progress) as pbar:
            while not state.done and state.attempt < state.max_attempts:
                state.attempt += 1
                logger.info(f"=== Auto post attempt {state.attempt}/{state.max_attempts} "
                            f"({state.success_count}/{target_count} published) ===")

                result = await self.run_attempt(state)
                if result.succeeded:
                    state.success_count += 1
                    pbar.update(1)
                    logger.info(f"Published {result.title} to {result.path}")
                self._save('batch', state.to_dict())

        if not state.done:
            self._enter(Stage.EXHAUSTED, state.attempt)
            error = BatchExhaustedError(state.attempt, state.success_count, target_count)
            logger.error(str(error))
            raise error

        self.stage = Stage.IDLE
        logger.info(f"Batch generation complete: {state.success_count} posts")
        return state
