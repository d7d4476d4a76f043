from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework.test import APITestCase

from question_bank.helpers.llm_utils import reset_llm_client
from question_bank.tests.fakes import (
    FakeLanguageModelClient,
    sdk_backed_client,
    status_error,
    timeout_error,
)

URL = "/api/questions/generate/"
GET_CLIENT = "question_bank.views.question_search.get_llm_client"


class GenerateQuestionsAPITests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user("aluno", password="senha-forte-123")
        self.client.force_authenticate(user=self.user)

    def test_missing_query_never_reaches_model(self):
        with patch(GET_CLIENT) as get_client:
            res = self.client.post(URL, {"query": ""}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"], "Query é obrigatória")
        get_client.assert_not_called()

    def test_generates_questions(self):
        fake = FakeLanguageModelClient(["1) Questão sobre atos administrativos..."])
        with patch(GET_CLIENT, return_value=fake):
            res = self.client.post(URL, {"query": "Direito Administrativo"}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"result": "1) Questão sobre atos administrativos..."})
        system, user = fake.calls[0]
        self.assertEqual(system["role"], "system")
        self.assertEqual(user["content"], "Gere questões de concurso sobre: Direito Administrativo")

    def test_facets_are_appended_to_prompt(self):
        fake = FakeLanguageModelClient()
        with patch(GET_CLIENT, return_value=fake):
            self.client.post(URL, {
                "query": "Direito Administrativo",
                "facets": {"board": "FGV", "institution": "qualquer", "period": "2024"},
            }, format="json")
        self.assertEqual(
            fake.calls[0][1]["content"],
            "Gere questões de concurso sobre: Direito Administrativo | Banca: FGV | Período: 2024",
        )

    def test_rate_limited_is_429(self):
        client, _ = sdk_backed_client(error=status_error(429))
        with patch(GET_CLIENT, return_value=client):
            res = self.client.post(URL, {"query": "Direito Administrativo"}, format="json")
        self.assertEqual(res.status_code, 429)

    def test_quota_exceeded_is_402(self):
        client, _ = sdk_backed_client(error=status_error(402))
        with patch(GET_CLIENT, return_value=client):
            res = self.client.post(URL, {"query": "Direito Administrativo"}, format="json")
        self.assertEqual(res.status_code, 402)

    def test_other_upstream_failure_is_500(self):
        for error in (status_error(500), timeout_error()):
            client, _ = sdk_backed_client(error=error)
            with patch(GET_CLIENT, return_value=client):
                res = self.client.post(URL, {"query": "Direito Administrativo"}, format="json")
            self.assertEqual(res.status_code, 500)
            self.assertEqual(res.json(), {"error": "Erro ao processar a busca"})

    def test_empty_completion_is_500(self):
        client, _ = sdk_backed_client(reply="")
        with patch(GET_CLIENT, return_value=client):
            res = self.client.post(URL, {"query": "Direito Administrativo"}, format="json")
        self.assertEqual(res.status_code, 500)

    @override_settings(LLM_API_KEY=None)
    def test_missing_api_key_is_500(self):
        reset_llm_client()
        self.addCleanup(reset_llm_client)
        res = self.client.post(URL, {"query": "Direito Administrativo"}, format="json")
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {"error": "Serviço de IA não configurado"})
