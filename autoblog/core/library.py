"""
Published post library: history lookups and publication.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import yaml

from autoblog.core.errors import PublishError
from autoblog.core.models import Article, QualityReport
from autoblog.formatters.markdown import MarkdownFormatter

# Configure logging
logger = logging.getLogger(__name__)

POST_SUFFIXES = ('.md', '.mdx')
MAX_FILENAME_CANDIDATES = 20


def split_front_matter(raw: str) -> Tuple[Dict, str]:
    """
    Split a post into its front matter and body.

    Args:
        raw: Full file content

    Returns:
        Tuple of (front matter dict, body); the dict is empty when the file
        has no parseable front matter
    """
    if not raw.startswith('---'):
        return {}, raw

    lines = raw.split('\n')
    for index in range(1, len(lines)):
        if lines[index].strip() == '---':
            header = '\n'.join(lines[1:index])
            body = '\n'.join(lines[index + 1:]).lstrip('\n')
            try:
                data = yaml.safe_load(header) or {}
            except yaml.YAMLError as e:
                logger.warning(f"Unreadable front matter: {e}")
                return {}, body
            return (data if isinstance(data, dict) else {}), body

    return {}, raw


class PostLibrary:
    """
    The directory of published posts.
    """
    def __init__(self, content_dir: Union[str, Path] = 'content/posts',
                 formatter: Optional[MarkdownFormatter] = None):
        self.content_dir = Path(content_dir)
        self.formatter = formatter or MarkdownFormatter()

    def _post_files(self) -> List[Path]:
        if not self.content_dir.exists():
            return []
        return sorted(p for p in self.content_dir.iterdir() if p.is_file() and p.suffix in POST_SUFFIXES)

    def _read_posts(self) -> List[Tuple[Dict, str]]:
        posts = []
        for path in self._post_files():
            with open(path, 'r', encoding='utf-8') as f:
                posts.append(split_front_matter(f.read()))
        return posts

    def titles(self) -> List[str]:
        """Titles of all published posts."""
        return [str(meta['title']) for meta, _ in self._read_posts() if meta.get('title')]

    def documents(self) -> List[str]:
        """Bodies of all published posts, used as the duplication corpus."""
        return [body for _, body in self._read_posts()]

    def _target_path(self, article: Article) -> Path:
        stem = f"{article.date}-{article.slug}"
        for n in range(1, MAX_FILENAME_CANDIDATES + 1):
            name = f"{stem}.mdx" if n == 1 else f"{stem}-{n}.mdx"
            path = self.content_dir / name
            if not path.exists():
                return path
        raise PublishError(
            f"No free file name for {stem} after {MAX_FILENAME_CANDIDATES} candidates"
        )

    def publish(self, article: Article, report: QualityReport) -> Path:
        """
        Write an approved article to the content directory.

        Args:
            article: Drafted article
            report: The quality report for this draft

        Returns:
            Path of the written post

        Raises:
            PublishError: if the report did not pass or no file name is free
        """
        if not report.passed:
            raise PublishError("Cannot publish because quality gate did not pass.")

        self.content_dir.mkdir(parents=True, exist_ok=True)
        path = self._target_path(article)
        with open(path, 'x', encoding='utf-8') as f:
            f.write(self.formatter.format_post(article))

        logger.info(f"Draft post created: {path}")
        return path
