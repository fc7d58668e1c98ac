"""
Command-line interface for autoblog.
"""
import sys
import argparse
import logging
import asyncio
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from autoblog.config import Config
from autoblog.core.cache import StateStore
from autoblog.core.errors import AutoblogError, BatchExhaustedError
from autoblog.core.library import PostLibrary
from autoblog.core.models import Article, QualityReport, ResearchBundle, TopicSelection
from autoblog.core.orchestrator import BatchOrchestrator
from autoblog.core.planner import TopicPlanner
from autoblog.core.quality import QualityGate
from autoblog.core.research import Researcher
from autoblog.core.scorer import CandidateScorer
from autoblog.core.writer import ArticleWriter
from autoblog.fetchers.feeds import TrendFeedFetcher
from autoblog.fetchers.hackernews import HackerNewsFetcher
from autoblog.utils.generation import StructuredGenerator
from autoblog.utils.nlp import TextAnalyzer
from autoblog.utils.notify import notify_failure

logger = logging.getLogger(__name__)


def setup_logging(level: str = 'INFO') -> None:
    """
    Configure logging to a dated log file and the console.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(f"autoblog_{datetime.now().strftime('%Y%m%d')}.log"),
            logging.StreamHandler()
        ]
    )


def parse_args(argv=None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="autoblog - automated technical blog pipeline")
    parser.add_argument("--config", help="Path to a YAML or JSON config file")
    parser.add_argument("--log-level", help="Logging level", default="INFO")
    parser.add_argument("--notify", action="store_true", help="Post failures to the configured webhook")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("plan", help="Select the next topic")
    subparsers.add_parser("research", help="Build the research bundle for the selected topic")
    subparsers.add_parser("write", help="Draft an article from the research bundle")
    subparsers.add_parser("gate", help="Run the quality gate on the drafted article")
    subparsers.add_parser("publish", help="Publish the drafted article if it passed the gate")
    batch = subparsers.add_parser("batch", help="Run the full pipeline until enough posts are published")
    batch.add_argument("--count", type=int, help="Number of posts to publish")
    return parser.parse_args(argv)


class Pipeline:
    """
    Wires every stage from one configuration.
    """
    def __init__(self, config: Config):
        self.config = config
        self.store = StateStore.from_config(config)
        self.library = PostLibrary(config.get('content.directory', 'content/posts'))
        self.analyzer = TextAnalyzer()
        self.generator = StructuredGenerator(config)
        generator = self.generator if self.generator.available else None

        user_agent = config.get('feeds.user_agent')
        timeout = float(config.get('feeds.timeout_seconds', 12))
        self.planner = TopicPlanner(
            self.library,
            scorer=CandidateScorer(self.analyzer),
            feed_fetcher=TrendFeedFetcher.from_config(config),
            hn_fetcher=HackerNewsFetcher(timeout=timeout, user_agent=user_agent),
            config=config,
            analyzer=self.analyzer,
        )
        self.researcher = Researcher(generator, config)
        self.writer = ArticleWriter(generator, config, analyzer=self.analyzer)
        self.gate = QualityGate(config)

    def _require(self, key: str):
        data = self.store.read_json(key)
        if data is None:
            raise AutoblogError(f"Missing {self.store.path(key)}; run the previous stage first")
        return data

    async def plan(self) -> int:
        selection = await self.planner.plan()
        self.store.write_json('topic', selection.to_dict())
        return 0

    async def research(self) -> int:
        selection = TopicSelection.from_dict(self._require('topic'))
        bundle = await self.researcher.research(selection)
        self.store.write_json('research', bundle.to_dict())
        return 0

    async def write(self) -> int:
        bundle = ResearchBundle.from_dict(self._require('research'))
        article = await self.writer.write(bundle)
        self.store.write_json('article', article.to_dict())
        return 0

    async def gate_article(self) -> int:
        article = Article.from_dict(self._require('article'))
        report = await self.gate.evaluate(article, self.library.documents())
        self.store.write_json('quality', report.to_dict())
        return 0 if report.passed else 1

    async def publish(self) -> int:
        article = Article.from_dict(self._require('article'))
        report = QualityReport.from_dict(self._require('quality'))
        self.library.publish(article, report)
        return 0

    async def batch(self, count: Optional[int] = None) -> int:
        orchestrator = BatchOrchestrator(
            self.planner,
            self.researcher,
            self.writer,
            self.gate,
            self.library,
            store=self.store,
            attempt_multiplier=int(self.config.get('batch.attempt_multiplier', 3)),
            progress=True,
        )
        target = count if count is not None else int(self.config.get('batch.posts_per_run', 5))
        await orchestrator.run(max(1, target))
        return 0

    async def run(self, command: str, args) -> int:
        if command == 'plan':
            return await self.plan()
        if command == 'research':
            return await self.research()
        if command == 'write':
            return await self.write()
        if command == 'gate':
            return await self.gate_article()
        if command == 'publish':
            return await self.publish()
        return await self.batch(getattr(args, 'count', None))


def main(argv=None):
    """
    Entry point for the command-line script.
    """
    # Explicitly reload environment variables from .env file
    load_dotenv(override=True)

    args = parse_args(argv)
    setup_logging(args.log_level)
    config = Config(args.config)

    try:
        return asyncio.run(Pipeline(config).run(args.command, args))
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except BatchExhaustedError as e:
        logger.error(f"{e}")
        failure = str(e)
    except Exception as e:
        logger.exception(f"An error occurred: {e}")
        failure = f"autoblog {args.command} failed: {e}"

    if args.notify:
        notify_failure(failure, config.get('notify.webhook_url'))
    return 1


if __name__ == "__main__":
    sys.exit(main())
