"""
Django management command to rebuild the full-text search entries of questions.
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import connection

from question_bank.helpers.search_index import refresh_all
from question_bank.models import Question


class Command(BaseCommand):
    help = 'Rebuild question_search entries (all questions, or one with --question-id)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--question-id',
            help='Refresh only the question with this id',
        )

    def handle(self, *args, **options):
        queryset = Question.objects.all()
        if options['question_id']:
            queryset = queryset.filter(pk=options['question_id'])
            if not queryset.exists():
                raise CommandError(f"Question {options['question_id']} not found")

        if connection.vendor != 'postgresql':
            self.stdout.write(
                self.style.WARNING(f'Database is {connection.vendor}: entries are created but not vectorized')
            )

        count = refresh_all(queryset)
        self.stdout.write(self.style.SUCCESS(f'Refreshed {count} search entries'))
