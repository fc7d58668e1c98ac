"""
Markdown formatting utilities for autoblog.
"""
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import yaml

from autoblog.core.models import Article, Claim, ResearchBundle, Source
from autoblog.utils.nlp import keyword_in_text

# Configure logging
logger = logging.getLogger(__name__)

FRONT_MATTER_FIELDS = ('title', 'summary', 'date', 'slug', 'category', 'canonical_url', 'tags')

SUMMARY_TEMPLATE = (
    "A practical guide to {topic}, with concrete implementation details, "
    "tradeoffs, and production-ready checks."
)

ROLLOUT_STEPS = (
    "1. Start in one bounded service or pipeline stage.",
    "2. Add one quality gate that can fail hard.",
    "3. Measure outcome metrics for one week.",
    "4. Expand scope only after stable trends.",
)

OPERATING_RHYTHM = (
    "- Daily: generate one candidate and enforce quality checks.",
    "- Weekly: review failures and tune thresholds.",
    "- Monthly: update topic heuristics from reader feedback.",
)


class TopicProfile(NamedTuple):
    keywords: Tuple[str, ...]
    problem: str
    core_idea: str
    steps: Tuple[str, ...]
    code_lang: str
    code_block: Tuple[str, ...]
    pitfalls: Tuple[str, ...]
    checklist: Tuple[str, ...]


RETRY_PROFILE = TopicProfile(
    keywords=('retry', 'distributed'),
    problem=(
        "Distributed requests fail for many reasons: network jitter, partial outages and "
        "upstream timeouts. Without disciplined retry boundaries, clients either give up too "
        "early or amplify failures with synchronized retry storms."
    ),
    core_idea=(
        "Design retries as a reliability budget: bounded attempts, exponential backoff and "
        "idempotent operations. Pair this with circuit-breaker signals so retries stop when "
        "dependency health degrades."
    ),
    steps=(
        "1. Classify errors into retryable and non-retryable categories.",
        "2. Set max-attempt and max-elapsed-time per endpoint.",
        "3. Add jitter to avoid synchronized bursts.",
        "4. Emit retry metrics (`attempt_count`, `retry_success`, `terminal_failure`).",
    ),
    code_lang='python',
    code_block=(
        "import random",
        "import time",
        "",
        "def with_retry(run, attempts=4, base=0.2, cap=5.0):",
        "    for attempt in range(1, attempts + 1):",
        "        try:",
        "            return run()",
        "        except TransientError:",
        "            if attempt == attempts:",
        "                raise",
        "            delay = min(cap, base * 2 ** (attempt - 1))",
        "            time.sleep(delay + random.uniform(0, 0.05))",
    ),
    pitfalls=(
        "- Retrying non-idempotent operations can create duplicate writes.",
        "- Missing jitter causes retry waves and cache stampedes.",
        "- No terminal alert makes silent degradation look healthy.",
    ),
    checklist=(
        "- [ ] Retry only documented transient errors",
        "- [ ] Idempotency key strategy defined",
        "- [ ] Retry metrics exported to dashboards",
        "- [ ] Circuit-breaker integration verified",
    ),
)

PIPELINE_PROFILE = TopicProfile(
    keywords=('ci', 'pipeline'),
    problem=(
        "CI pipelines often become slow and flaky as checks accumulate. Teams then skip "
        "safeguards to regain speed, which raises merge risk and post-deploy failures."
    ),
    core_idea=(
        "Split checks by confidence and cost: run fail-fast validations early, run expensive "
        "suites conditionally and cache dependencies aggressively. The goal is fast feedback "
        "without reducing signal quality."
    ),
    steps=(
        "1. Separate lint, type and unit checks into a fast lane.",
        "2. Trigger integration tests only on affected paths.",
        "3. Reuse cache keys tied to lockfiles and tool versions.",
        "4. Publish per-job durations for weekly optimization.",
    ),
    code_lang='yaml',
    code_block=(
        "jobs:",
        "  quick-check:",
        "    runs-on: ubuntu-latest",
        "    steps:",
        "      - uses: actions/checkout@v4",
        "      - run: make lint typecheck unit",
        "  integration:",
        "    needs: quick-check",
        "    if: contains(github.event.pull_request.changed_files, 'api/')",
        "    runs-on: ubuntu-latest",
        "    steps:",
        "      - uses: actions/checkout@v4",
        "      - run: make integration",
    ),
    pitfalls=(
        "- Running every heavy job on every PR causes queue congestion.",
        "- Unstable cache keys create nondeterministic results.",
        "- No flaky-test policy leads to silent trust erosion.",
    ),
    checklist=(
        "- [ ] Fast lane under 10 minutes",
        "- [ ] Heavy jobs path-filtered",
        "- [ ] Cache hit rate monitored",
        "- [ ] Flaky tests quarantined with owner",
    ),
)

DEFAULT_PROFILE = TopicProfile(
    keywords=(),
    problem=(
        "Engineering initiatives often fail at the integration stage: the idea is valid, but "
        "teams cannot translate it into reversible and observable delivery changes."
    ),
    core_idea=(
        "Use a constraints-first rollout. Define objective success metrics, add one mandatory "
        "gate, and expand only when outcomes remain stable."
    ),
    steps=(
        "1. Define success and failure thresholds before coding.",
        "2. Add one mandatory gate that blocks unsafe publication.",
        "3. Capture logs, metrics and owner metadata.",
        "4. Roll out in stages with explicit rollback instructions.",
    ),
    code_lang='python',
    code_block=(
        "def enforce_gate(report):",
        "    if not report['pass']:",
        "        raise RuntimeError('publish blocked: ' + ', '.join(report['reasons']))",
    ),
    pitfalls=(
        "- Publishing automation without rollback notes.",
        "- Optimizing volume without measuring quality outcomes.",
        "- Relying on manual checks for repeated risks.",
    ),
    checklist=(
        "- [ ] At least 2 reliable references linked",
        "- [ ] Quality gate blocks low-confidence output",
        "- [ ] Duplicate threshold enforced",
        "- [ ] Alert channel tested",
    ),
)

TOPIC_PROFILES = (RETRY_PROFILE, PIPELINE_PROFILE)


class MarkdownFormatter:
    """
    Formats research bundles and articles into Markdown content.
    """
    def __init__(self, profiles: Optional[Sequence[TopicProfile]] = None,
                 default_profile: TopicProfile = DEFAULT_PROFILE):
        """
        Initialize the MarkdownFormatter.

        Args:
            profiles: Topic profiles checked in order (defaults to TOPIC_PROFILES)
            default_profile: Profile used when no keyword matches
        """
        self.profiles = tuple(profiles) if profiles is not None else TOPIC_PROFILES
        self.default_profile = default_profile

    def profile_for(self, topic: str) -> TopicProfile:
        lower = (topic or '').lower()
        for profile in self.profiles:
            if any(keyword_in_text(kw, lower) for kw in profile.keywords):
                return profile
        return self.default_profile

    def format_summary(self, topic: str) -> str:
        return SUMMARY_TEMPLATE.format(topic=(topic or '').lower())

    def _format_claim(self, claim: Claim) -> str:
        return f"- {claim.text} ([{claim.source_title}]({claim.source_url}))"

    def _format_reference(self, source: Source) -> str:
        return f"- [{source.title}]({source.url})"

    def format_article_body(self, bundle: ResearchBundle) -> str:
        """
        Render the deterministic article body for a research bundle.

        Every claim is rendered with a link to its source, and every source of
        the bundle is listed under References.

        Args:
            bundle: Verified research bundle

        Returns:
            Markdown body without front matter
        """
        profile = self.profile_for(bundle.topic)
        claim_lines = "\n".join(self._format_claim(c) for c in bundle.claims)
        references = "\n".join(self._format_reference(s) for s in bundle.source_list)

        sections: List[str] = [
            "## Problem",
            profile.problem,
            (
                "In many teams, this problem stays invisible until it shows up as failed deploys, "
                "delayed reviews or noisy incidents. By the time symptoms appear, the fix is more "
                "expensive because multiple systems already depend on the wrong default behavior."
            ),
            "## Core Idea",
            profile.core_idea,
            f"Key points from current references:\n{claim_lines}",
            (
                "Use these claims as implementation constraints, not as abstract guidance. If a "
                "claim cannot be checked automatically, it usually means the rollout is still too "
                "broad."
            ),
            "## Implementation",
            "\n".join(profile.steps),
            f"```{profile.code_lang}\n" + "\n".join(profile.code_block) + "\n```",
            (
                "The important part is not the exact syntax, but the explicit gate condition and "
                "fallback path. This lets engineers move fast without losing observability."
            ),
            "### Rollout pattern",
            "\n".join(ROLLOUT_STEPS),
            "## Pitfalls",
            "\n".join(profile.pitfalls),
            "## Practical Checklist",
            "\n".join(profile.checklist),
            "Suggested operating rhythm:",
            "\n".join(OPERATING_RHYTHM),
            "## References",
            references,
        ]
        return "\n\n".join(sections) + "\n"

    def front_matter(self, article: Article) -> Dict:
        data = {key: getattr(article, key) for key in FRONT_MATTER_FIELDS}
        data['tags'] = list(article.tags)
        data['sources'] = [source.to_dict() for source in article.sources]
        return data

    def format_post(self, article: Article) -> str:
        """
        Render a publishable post: YAML front matter followed by the body.

        Args:
            article: Article to render

        Returns:
            Complete file content
        """
        header = yaml.safe_dump(
            self.front_matter(article),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        body = article.content_markdown.rstrip('\n')
        return f"---\n{header}---\n\n{body}\n"
