from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import override_settings
from rest_framework.test import APITestCase

from question_bank.helpers.llm_utils import reset_llm_client
from question_bank.tests.fakes import FakeLanguageModelClient, sdk_backed_client, status_error
from question_bank.tests.test_refinement import FIRST_REPLY, SUMMARY

URL = "/api/questions/refine/"
GET_CLIENT = "question_bank.views.refinement.get_llm_client"


class RefineSearchAPITests(APITestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user("aluno", password="senha-forte-123")
        self.client.force_authenticate(user=self.user)

    def test_missing_messages_is_400(self):
        with patch(GET_CLIENT) as get_client:
            res = self.client.post(URL, {}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"], "Messages array é obrigatória")
        get_client.assert_not_called()

    def test_invalid_role_is_400(self):
        res = self.client.post(URL, {"messages": [{"role": "system", "content": "oi"}]}, format="json")
        self.assertEqual(res.status_code, 400)

    @override_settings(LLM_API_KEY=None)
    def test_transcript_ending_on_assistant_is_400_before_model_lookup(self):
        reset_llm_client()
        self.addCleanup(reset_llm_client)
        messages = [
            {"role": "user", "content": "Tópico inicial: licitações"},
            {"role": "assistant", "content": FIRST_REPLY},
        ]
        res = self.client.post(URL, {"messages": messages}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "A última mensagem deve ser do usuário"})

    def test_first_turn(self):
        fake = FakeLanguageModelClient([FIRST_REPLY])
        with patch(GET_CLIENT, return_value=fake):
            res = self.client.post(URL, {"topic": "questões de FCC sobre Português"}, format="json")

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["state"], "awaiting_user_reply")
        self.assertIsNone(body["facets"])
        self.assertEqual(body["topic"], "questões de FCC sobre Português")
        self.assertEqual(body["asked"], ["institution", "role", "period"])
        self.assertNotIn("Banca organizadora", body["result"])

    def test_completed_turn_returns_facets(self):
        fake = FakeLanguageModelClient([SUMMARY])
        messages = [
            {"role": "user", "content": "Tópico inicial: licitações"},
            {"role": "assistant", "content": FIRST_REPLY},
            {"role": "user", "content": "FGV, analista, 2023"},
        ]
        with patch(GET_CLIENT, return_value=fake):
            res = self.client.post(URL, {"messages": messages}, format="json")

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["state"], "complete")
        self.assertEqual(body["facets"], {
            "board": "FGV", "institution": None, "role": "Analista", "period": "2023", "subject": None,
        })
        self.assertEqual(len(fake.calls[0]), 4)

    def test_skip_completes_without_model(self):
        with patch(GET_CLIENT) as get_client:
            res = self.client.post(URL, {"topic": "licitações", "skip": True}, format="json")

        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["state"], "complete")
        self.assertEqual(set(body["facets"].values()), {None})
        self.assertEqual(body["topic"], "licitações")
        get_client.assert_not_called()

    def test_rate_limited_is_429(self):
        client, _ = sdk_backed_client(error=status_error(429))
        with patch(GET_CLIENT, return_value=client):
            res = self.client.post(URL, {"topic": "licitações"}, format="json")
        self.assertEqual(res.status_code, 429)
        self.assertIn("Limite de requisições excedido", res.json()["error"])

    def test_quota_exceeded_is_402(self):
        client, _ = sdk_backed_client(error=status_error(402))
        with patch(GET_CLIENT, return_value=client):
            res = self.client.post(URL, {"topic": "licitações"}, format="json")
        self.assertEqual(res.status_code, 402)
        self.assertIn("Créditos insuficientes", res.json()["error"])

    def test_other_upstream_failure_is_500(self):
        client, _ = sdk_backed_client(error=status_error(503))
        with patch(GET_CLIENT, return_value=client):
            res = self.client.post(URL, {"topic": "licitações"}, format="json")
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {"error": "Erro ao processar refinamento"})

    @override_settings(LLM_API_KEY=None)
    def test_missing_api_key_is_500(self):
        reset_llm_client()
        self.addCleanup(reset_llm_client)
        res = self.client.post(URL, {"topic": "licitações"}, format="json")
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {"error": "Serviço de IA não configurado"})
