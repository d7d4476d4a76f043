"""
Error payloads shared by the question bank endpoints.

Every failure leaves a handler as {"error": "..."} with a status the client
can act on: 400 (bad request), 429 (wait and retry), 402 (add credits) or
500 (opaque processing error).
"""
import logging

from rest_framework import status
from rest_framework.response import Response

from ..helpers.llm_utils import LLMQuotaExceededError, LLMRateLimitedError

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Limite de requisições excedido. Tente novamente mais tarde."
QUOTA_EXCEEDED_MESSAGE = "Créditos insuficientes. Por favor, adicione créditos ao seu workspace."
NOT_CONFIGURED_MESSAGE = "Serviço de IA não configurado"


def validation_error_response(message, details=None):
    payload = {'error': message}
    if details:
        payload['details'] = details
    return Response(payload, status=status.HTTP_400_BAD_REQUEST)


def llm_error_response(exc, failure_message):
    # Classified upstream failure -> client payload
    if isinstance(exc, LLMRateLimitedError):
        logger.warning(f"Language model rate limited: {exc}")
        return Response({'error': RATE_LIMITED_MESSAGE}, status=status.HTTP_429_TOO_MANY_REQUESTS)

    if isinstance(exc, LLMQuotaExceededError):
        logger.warning(f"Language model quota exhausted: {exc}")
        return Response({'error': QUOTA_EXCEEDED_MESSAGE}, status=status.HTTP_402_PAYMENT_REQUIRED)

    logger.error(
        f"Language model error: status={getattr(exc, 'status_code', None)} "
        f"body={getattr(exc, 'body', None)!r} detail={exc}"
    )
    return server_error_response(failure_message)


def configuration_error_response(exc):
    logger.critical(f"Language model not configured: {exc}")
    return server_error_response(NOT_CONFIGURED_MESSAGE)


def server_error_response(message):
    return Response({'error': message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
