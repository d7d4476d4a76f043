from unittest.mock import patch

from django.contrib.auth import get_user_model
from rest_framework.test import APITestCase

from question_bank.tests.fakes import FakeLanguageModelClient, sdk_backed_client, status_error

URL = "/api/questions/explain/"
GET_CLIENT = "question_bank.views.explanation.get_llm_client"

PAYLOAD = {
    "questionStem": "Qual princípio rege a administração pública quanto à publicidade dos atos?",
    "correctAnswer": "C) Publicidade",
    "userQuestion": "Por que não é a alternativa A?",
}


class ExplainQuestionAPITests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user("aluno", password="senha-forte-123")
        self.client.force_authenticate(user=self.user)

    def test_missing_field_never_reaches_model(self):
        for field in PAYLOAD:
            fake = FakeLanguageModelClient()
            data = {**PAYLOAD, field: "  "}
            with patch(GET_CLIENT, return_value=fake):
                res = self.client.post(URL, data, format="json")
            self.assertEqual(res.status_code, 400)
            self.assertEqual(res.json(), {"error": "Dados incompletos"})
            self.assertEqual(fake.calls, [])

    def test_explains_question(self):
        fake = FakeLanguageModelClient(["A alternativa A trata da eficiência..."])
        with patch(GET_CLIENT, return_value=fake):
            res = self.client.post(URL, PAYLOAD, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"explanation": "A alternativa A trata da eficiência..."})
        user_message = fake.calls[0][1]["content"]
        self.assertIn(f"Questão: {PAYLOAD['questionStem']}", user_message)
        self.assertIn("Resposta correta: C) Publicidade", user_message)
        self.assertIn("Pergunta do aluno: Por que não é a alternativa A?", user_message)

    def test_upstream_failures_are_classified(self):
        for status_code, expected in ((429, 429), (402, 402), (502, 500)):
            client, _ = sdk_backed_client(error=status_error(status_code))
            with patch(GET_CLIENT, return_value=client):
                res = self.client.post(URL, PAYLOAD, format="json")
            self.assertEqual(res.status_code, expected)
        self.assertEqual(res.json(), {"error": "Erro ao processar explicação"})
