"""
Two-phase question retrieval.

1. Search: ranked full-text match against the question_search index, using
   websearch syntax (quotes, -exclusion, implicit AND) in the configured
   language. Only the top `limit` question ids are kept.
2. Hydrate: load exactly those questions with their choices ordered by
   position, newest first.

Search errors propagate; there is no unranked fallback.
"""
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.contrib.postgres.search import SearchQuery, SearchRank
from django.db.models import F, Prefetch

from ..models import Choice, Question, QuestionSearch
from .refinement import normalize_label

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "Nenhuma questão encontrada sobre este tópico no momento."


@dataclass
class RetrievalResult:
    questions: list = field(default_factory=list)
    message: str = ''

    @property
    def count(self):
        return len(self.questions)


def build_search_expression(query, facets=None):
    # Append each concrete facet value as a quoted phrase so the refined
    # search also has to match the indexed metadata
    expression = query.strip()
    if facets is None:
        return expression

    normalized = normalize_label(expression)
    for term in facets.search_terms():
        term = term.replace('"', '').strip()
        if not term or normalize_label(term) in normalized:
            continue
        expression += f' "{term}"'
    return expression


def search_question_ids(expression, limit):
    config = settings.QUESTION_SEARCH_CONFIG
    search_query = SearchQuery(expression, search_type='websearch', config=config)
    rows = (
        QuestionSearch.objects
        .filter(tsv=search_query)
        .annotate(rank=SearchRank(F('tsv'), search_query))
        .order_by('-rank', '-question__created_at')
        .values_list('question_id', flat=True)[:limit]
    )

    seen = set()
    ids = []
    for question_id in rows:
        if question_id in seen:
            continue
        seen.add(question_id)
        ids.append(question_id)
    return ids


def hydrate_questions(question_ids):
    if not question_ids:
        return []
    return list(
        Question.objects
        .filter(id__in=question_ids)
        .select_related('subject', 'topic')
        .prefetch_related(Prefetch('choices', queryset=Choice.objects.order_by('position')))
        .order_by('-created_at', 'id')
    )


def retrieve_questions(query, limit=None, facets=None):
    limit = limit or settings.QUESTION_SEARCH_DEFAULT_LIMIT
    expression = build_search_expression(query, facets)
    logger.info(f"Searching questions for: {expression!r} (limit={limit})")

    question_ids = search_question_ids(expression, limit)
    if not question_ids:
        logger.info("No questions matched")
        return RetrievalResult(questions=[], message=NO_RESULTS_MESSAGE)

    questions = hydrate_questions(question_ids[:limit])
    logger.info(f"Found {len(questions)} questions")
    return RetrievalResult(questions=questions)
