"""
Django management command to check choice invariants of stored questions.
"""

from django.core.management.base import BaseCommand
from django.db.models import Prefetch

from question_bank.models import Choice, Question


class Command(BaseCommand):
    help = 'List questions whose choices break the question type rules'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=None,
            help='Only check the N most recent questions',
        )

    def handle(self, *args, **options):
        questions = (
            Question.objects
            .prefetch_related(Prefetch('choices', queryset=Choice.objects.order_by('position')))
            .order_by('-created_at')
        )
        if options['limit']:
            questions = questions[:options['limit']]

        checked = 0
        broken = 0
        for question in questions:
            checked += 1
            problems = question.choice_problems()
            if problems:
                broken += 1
                self.stdout.write(f"Question {question.id}: {'; '.join(problems)}")

        if broken:
            self.stdout.write(self.style.WARNING(f'{broken} of {checked} questions have problems'))
        else:
            self.stdout.write(self.style.SUCCESS(f'All {checked} questions are consistent'))
