# Keeps the question_search projection in sync with questions.
# The tsv column is only computed on PostgreSQL; on other backends the row is
# still created so the one-to-one relation holds.

import logging

from django.conf import settings
from django.contrib.postgres.search import SearchVector
from django.db import connection
from django.db.models import TextField, Value

from ..models import Question, QuestionSearch

logger = logging.getLogger(__name__)


def metadata_text(question):
    # Provenance text indexed alongside the stem (board, institution, role...)
    parts = [
        question.board,
        question.institution,
        question.role,
        question.source,
        str(question.year) if question.year else None,
        question.subject.name if question.subject_id else None,
        question.topic.name if question.topic_id else None,
    ]
    return ' '.join(part for part in parts if part)


def build_search_vector(question, config=None):
    config = config or settings.QUESTION_SEARCH_CONFIG
    stem = SearchVector(Value(question.stem, output_field=TextField()), weight='A', config=config)
    metadata = SearchVector(Value(metadata_text(question), output_field=TextField()), weight='B', config=config)
    return stem + metadata


def refresh_question_search(question):
    entry, created = QuestionSearch.objects.get_or_create(question=question)

    if connection.vendor != 'postgresql':
        logger.debug(f"Skipping tsv refresh for question {question.pk} on {connection.vendor}")
        return entry

    QuestionSearch.objects.filter(pk=question.pk).update(tsv=build_search_vector(question))
    logger.debug(f"{'Created' if created else 'Refreshed'} search entry for question {question.pk}")
    return entry


def refresh_all(queryset=None):
    # Rebuild entries for every question in `queryset`; returns the count
    queryset = queryset if queryset is not None else Question.objects.all()
    count = 0
    for question in queryset.select_related('subject', 'topic').iterator():
        refresh_question_search(question)
        count += 1
    logger.info(f"Refreshed {count} question search entries")
    return count
