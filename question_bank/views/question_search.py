# Question search endpoints:
# - retrieve: ranked full-text search over stored questions
# - generate: exam-style questions written by the language model

import logging

from django.core.exceptions import ImproperlyConfigured
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..helpers.llm_utils import LLMError, get_llm_client
from ..helpers.question_retrieval import retrieve_questions
from ..helpers.refinement import RefinedFacets, annotate_query
from ..helpers.study_prompts import study_prompt_manager
from ..serializers import GenerateQuestionsSerializer, QuestionSerializer, RetrieveQuestionsSerializer
from .responses import (
    configuration_error_response,
    llm_error_response,
    server_error_response,
    validation_error_response,
)

logger = logging.getLogger(__name__)

QUERY_REQUIRED_MESSAGE = "Query é obrigatória"


def _invalid_request(errors):
    if 'query' in errors:
        return validation_error_response(QUERY_REQUIRED_MESSAGE, errors)
    return validation_error_response("Parâmetros inválidos", errors)


@api_view(['POST'])
def retrieve_questions_view(request):
    # Retrieve stored questions matching a free-text query.
    #
    # post {
    #     "query": "controle de constitucionalidade",
    #     "limit": 3 (optional),
    #     "facets": {"board": "FGV", ...} (optional)
    # }
    #
    # returns: { "questions": [...], "count": n } plus "message" when nothing matched
    serializer = RetrieveQuestionsSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer.errors)

    data = serializer.validated_data
    facets = RefinedFacets.from_dict(data.get('facets'))

    try:
        result = retrieve_questions(data['query'], limit=data.get('limit'), facets=facets)
    except Exception as e:
        logger.exception(f"Question search failed for {data['query']!r}: {e}")
        return server_error_response("Erro ao buscar questões")

    payload = {
        'questions': QuestionSerializer(result.questions, many=True).data,
        'count': result.count,
    }
    if result.message:
        payload['message'] = result.message
    return Response(payload)


@api_view(['POST'])
def generate_questions_view(request):
    # Generate exam-style questions about a topic.
    #
    # post {
    #     "query": "Direito Administrativo",
    #     "facets": {"board": "FGV", "period": "2024"} (optional)
    # }
    #
    # returns: { "result": "...generated questions with answer key..." }
    serializer = GenerateQuestionsSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer.errors)

    data = serializer.validated_data
    query = annotate_query(data['query'], RefinedFacets.from_dict(data.get('facets')))

    try:
        client = get_llm_client()
    except ImproperlyConfigured as e:
        return configuration_error_response(e)

    logger.info(f"Generating questions for: {query!r}")
    try:
        messages = study_prompt_manager.get_prompt_for_task('generation', {'query': query})
        result = client.complete(messages)
    except LLMError as e:
        return llm_error_response(e, "Erro ao processar a busca")
    except Exception as e:
        logger.exception(f"Error generating questions: {e}")
        return server_error_response("Erro ao processar a busca")

    logger.info("Question generation finished")
    return Response({'result': result})
