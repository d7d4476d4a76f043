# Search refinement dialogue endpoint.
# The client owns the transcript and resends all of it each round.

import logging

from django.core.exceptions import ImproperlyConfigured
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..helpers.llm_utils import LLMError, get_llm_client
from ..helpers.refinement import (
    TranscriptError,
    build_transcript,
    next_turn,
    require_user_turn,
    skip_refinement,
    topic_from_transcript,
)
from ..serializers import RefineSearchSerializer
from .responses import (
    configuration_error_response,
    llm_error_response,
    server_error_response,
    validation_error_response,
)

logger = logging.getLogger(__name__)

MESSAGES_REQUIRED_MESSAGE = "Messages array é obrigatória"


def turn_payload(turn):
    return {
        'result': turn.text,
        'state': turn.state,
        'facets': turn.facets.as_dict() if turn.facets is not None else None,
        'topic': turn.topic,
        'asked': list(turn.asked),
    }


@api_view(['POST'])
def refine_search_view(request):
    # Next assistant turn of the refinement dialogue.
    #
    # post {
    #     "messages": [{"role": "user", "content": "Tópico inicial: ..."}, ...],
    #     "topic": "..." (optional, prepended as the restatement turn),
    #     "skip": false (optional, abandon refinement with no facets)
    # }
    #
    # returns: {
    #     "result": "...assistant turn...",
    #     "state": "awaiting_user_reply" | "complete",
    #     "facets": {...} | null,
    #     "topic": "...",
    #     "asked": [...]
    # }
    serializer = RefineSearchSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(MESSAGES_REQUIRED_MESSAGE, serializer.errors)

    data = serializer.validated_data
    topic = data.get('topic') or None

    transcript = ()
    if data.get('messages') or topic:
        try:
            transcript = build_transcript(data.get('messages'), topic=topic)
        except TranscriptError as e:
            return validation_error_response(str(e))

    if data.get('skip'):
        turn = skip_refinement(topic or topic_from_transcript(transcript))
        logger.info("Search refinement skipped")
        return Response(turn_payload(turn))

    try:
        require_user_turn(transcript)
    except TranscriptError as e:
        return validation_error_response(str(e))

    try:
        client = get_llm_client()
    except ImproperlyConfigured as e:
        return configuration_error_response(e)

    logger.info(f"Processing search refinement ({len(transcript)} turns)")
    try:
        turn = next_turn(transcript, client)
    except TranscriptError as e:
        return validation_error_response(str(e))
    except LLMError as e:
        return llm_error_response(e, "Erro ao processar refinamento")
    except Exception as e:
        logger.exception(f"Error processing search refinement: {e}")
        return server_error_response("Erro ao processar refinamento")

    logger.info(f"Search refinement processed (state={turn.state})")
    return Response(turn_payload(turn))
