from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APITestCase

from question_bank.helpers.search_index import metadata_text
from question_bank.models import Choice, Question, QuestionSearch, Subject, Topic


def add_choices(question, *correct_flags):
    for position, correct in enumerate(correct_flags, start=1):
        Choice.objects.create(
            question=question, label="ABCDE"[position - 1], content=f"alternativa {position}",
            position=position, is_correct=correct,
        )


class ChoiceRulesTests(TestCase):
    def test_single_answer_needs_exactly_one_correct(self):
        question = Question.objects.create(stem="Assinale a correta.", type=Question.MULTIPLE_SINGLE)
        add_choices(question, True, True, False)
        self.assertEqual(len(question.choice_problems()), 1)

    def test_consistent_single_answer(self):
        question = Question.objects.create(stem="Assinale a correta.")
        add_choices(question, False, True, False, False)
        self.assertEqual(question.choice_problems(), [])

    def test_multi_answer_needs_one_correct(self):
        question = Question.objects.create(stem="Assinale as corretas.", type=Question.MULTIPLE_MULTI)
        add_choices(question, False, False)
        self.assertEqual(len(question.choice_problems()), 1)

    def test_objective_question_without_choices(self):
        question = Question.objects.create(stem="Certo ou errado?", type=Question.TRUE_FALSE)
        self.assertEqual(len(question.choice_problems()), 1)

    def test_open_question_has_no_choice_rules(self):
        question = Question.objects.create(stem="Disserte sobre licitações.", type=Question.OPEN)
        self.assertEqual(question.choice_problems(), [])

    def test_positions_are_unique_per_question(self):
        question = Question.objects.create(stem="Assinale a correta.")
        Choice.objects.create(question=question, label="A", content="um", position=1, is_correct=True)
        with self.assertRaises(IntegrityError), transaction.atomic():
            Choice.objects.create(question=question, label="B", content="dois", position=1)


class SearchEntryTests(TestCase):
    def setUp(self):
        self.subject = Subject.objects.create(name="Direito Administrativo")
        self.topic = Topic.objects.create(name="Licitações", subject=self.subject)

    def test_saving_question_creates_search_entry(self):
        question = Question.objects.create(stem="Sobre licitações...", subject=self.subject)
        self.assertTrue(QuestionSearch.objects.filter(question=question).exists())

    def test_deleting_question_deletes_search_entry(self):
        question = Question.objects.create(stem="Sobre licitações...")
        question.delete()
        self.assertEqual(QuestionSearch.objects.count(), 0)

    def test_metadata_text(self):
        question = Question.objects.create(
            stem="Sobre licitações...", board="FGV", institution="BNDES", role="Analista",
            year=2024, subject=self.subject, topic=self.topic,
        )
        self.assertEqual(metadata_text(question), "FGV BNDES Analista 2024 Direito Administrativo Licitações")


class ManagementCommandTests(TestCase):
    def test_refresh_question_search(self):
        Question.objects.create(stem="Primeira")
        Question.objects.create(stem="Segunda")
        QuestionSearch.objects.all().delete()

        out = StringIO()
        call_command("refresh_question_search", stdout=out)

        self.assertIn("Refreshed 2 search entries", out.getvalue())
        self.assertEqual(QuestionSearch.objects.count(), 2)

    def test_refresh_unknown_question(self):
        with self.assertRaises(CommandError):
            call_command("refresh_question_search", question_id="00000000-0000-0000-0000-000000000000")

    def test_check_question_bank_reports_problems(self):
        broken = Question.objects.create(stem="Duas corretas")
        add_choices(broken, True, True)
        ok = Question.objects.create(stem="Uma correta")
        add_choices(ok, True, False)

        out = StringIO()
        call_command("check_question_bank", stdout=out)

        output = out.getvalue()
        self.assertIn(str(broken.id), output)
        self.assertNotIn(str(ok.id), output)
        self.assertIn("1 of 2 questions have problems", output)


class HealthCheckTests(APITestCase):
    def test_health_check_is_public(self):
        Question.objects.create(stem="Uma questão")
        res = self.client.get("/api/questions/health/")
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["questions"], 1)
