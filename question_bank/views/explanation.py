import logging

from django.core.exceptions import ImproperlyConfigured
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..helpers.llm_utils import LLMError, get_llm_client
from ..helpers.study_prompts import study_prompt_manager
from .responses import (
    configuration_error_response,
    llm_error_response,
    server_error_response,
    validation_error_response,
)

logger = logging.getLogger(__name__)


def _text(value):
    return value.strip() if isinstance(value, str) else ''


@api_view(['POST'])
def explain_question_view(request):
    # Tutor-style explanation of a question's answer.
    #
    # post {
    #     "questionStem": "...",
    #     "correctAnswer": "C) ...",
    #     "userQuestion": "Por que a alternativa A está errada?"
    # }
    #
    # returns: { "explanation": "..." }
    question_stem = _text(request.data.get('questionStem'))
    correct_answer = _text(request.data.get('correctAnswer'))
    user_question = _text(request.data.get('userQuestion'))

    # validation happens before anything goes upstream
    if not question_stem or not correct_answer or not user_question:
        return validation_error_response("Dados incompletos")

    try:
        client = get_llm_client()
    except ImproperlyConfigured as e:
        return configuration_error_response(e)

    try:
        messages = study_prompt_manager.get_prompt_for_task('explanation', {
            'question_stem': question_stem,
            'correct_answer': correct_answer,
            'user_question': user_question,
        })
        explanation = client.complete(messages)
    except LLMError as e:
        return llm_error_response(e, "Erro ao processar explicação")
    except Exception as e:
        logger.exception(f"Error in explain-question: {e}")
        return server_error_response("Erro ao processar explicação")

    return Response({'explanation': explanation})
