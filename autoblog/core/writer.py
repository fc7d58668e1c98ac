"""
Drafting stage: turn a research bundle into an article.
"""
import json
import logging
from datetime import date
from typing import Optional, Tuple

from autoblog.config import config as default_config
from autoblog.core.models import Article, ResearchBundle
from autoblog.formatters.markdown import MarkdownFormatter
from autoblog.utils.nlp import TextAnalyzer
from autoblog.utils.text import slugify

# Configure logging
logger = logging.getLogger(__name__)

MAX_ARTICLE_SOURCES = 4

SYSTEM_PROMPT = (
    "You write practical articles for a software engineering blog. "
    "Reply with a JSON object with the keys \"summary\" (one or two sentences, at most "
    "300 characters) and \"content_markdown\" (the article body in Markdown, without "
    "front matter). The body needs at least four '## ' sections, including "
    "'## References' listing every provided source as a Markdown link. "
    "Only cite the provided sources."
)


class ArticleWriter:
    """
    Drafts articles from research bundles.
    """
    def __init__(self, generator=None, config=None, formatter: Optional[MarkdownFormatter] = None,
                 analyzer: Optional[TextAnalyzer] = None):
        """
        Initialize the writer.

        Args:
            generator: StructuredGenerator, or None to always use the template
            config: Config instance (defaults to the global configuration)
            formatter: Formatter rendering the template body
            analyzer: TextAnalyzer used for tags
        """
        self.generator = generator
        self.config = config or default_config
        self.formatter = formatter or MarkdownFormatter()
        self.analyzer = analyzer or TextAnalyzer()
        self.base_url = str(self.config.get('site.base_url', 'https://example.dev')).rstrip('/')

    def _user_prompt(self, bundle: ResearchBundle) -> str:
        return json.dumps({
            'topic': bundle.topic,
            'angle': bundle.angle,
            'claims': [claim.to_dict() for claim in bundle.claims],
            'sources': [{'title': s.title, 'url': s.url} for s in bundle.source_list],
        }, ensure_ascii=False)

    async def _generated_text(self, bundle: ResearchBundle) -> Tuple[Optional[str], Optional[str]]:
        if self.generator is None:
            return None, None

        payload = await self.generator.generate(SYSTEM_PROMPT, self._user_prompt(bundle))
        if not payload:
            return None, None

        summary = payload.get('summary')
        body = payload.get('content_markdown')
        if not isinstance(body, str) or not body.strip():
            logger.warning("Generated draft has no usable body, using the template")
            body = None
        if not isinstance(summary, str) or not summary.strip():
            summary = None
        return (summary.strip() if summary else None), body

    async def write(self, bundle: ResearchBundle, today: Optional[date] = None) -> Article:
        """
        Draft an article.

        Metadata is always derived here; a generation service only supplies
        the summary and body, and any sources it returns are ignored.

        Args:
            bundle: Verified research bundle
            today: Publication date (defaults to today)

        Returns:
            Article ready for the quality gate
        """
        slug = slugify(bundle.topic)
        summary, body = await self._generated_text(bundle)

        article = Article(
            title=bundle.topic,
            summary=summary or self.formatter.format_summary(bundle.topic),
            slug=slug,
            date=(today or date.today()).isoformat(),
            tags=self.analyzer.infer_tags(bundle.topic),
            category=bundle.category,
            canonical_url=f"{self.base_url}/blog/{slug}",
            sources=list(bundle.source_list[:MAX_ARTICLE_SOURCES]),
            content_markdown=body or self.formatter.format_article_body(bundle),
        )
        logger.info(f"Article draft generated: {article.slug}")
        return article
