# question bank signals
# keep the full-text search projection in sync when questions change

import logging
from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import Question, Subject, Topic
from .helpers.search_index import refresh_question_search, refresh_all

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Question)
def refresh_search_entry(sender, instance, raw=False, **kwargs):
    # fixtures load rows raw; the refresh command rebuilds those afterwards
    if raw:
        return
    refresh_question_search(instance)


@receiver(post_save, sender=Subject)
def refresh_subject_questions(sender, instance, created=False, raw=False, **kwargs):
    # subject names are part of the indexed metadata
    if raw or created:
        return
    count = refresh_all(instance.questions.all())
    logger.info(f"Subject '{instance.name}' changed, refreshed {count} search entries")


@receiver(post_save, sender=Topic)
def refresh_topic_questions(sender, instance, created=False, raw=False, **kwargs):
    if raw or created:
        return
    count = refresh_all(instance.questions.all())
    logger.info(f"Topic '{instance.name}' changed, refreshed {count} search entries")
