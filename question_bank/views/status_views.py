from django.conf import settings
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..models import Question, QuestionSearch


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    # simple health check endpoint.
    return Response({
        'status': 'healthy',
        'service': 'question_bank',
        'llm_configured': bool(settings.LLM_API_KEY),
        'llm_model': settings.LLM_MODEL,
        'search_config': settings.QUESTION_SEARCH_CONFIG,
        'questions': Question.objects.count(),
        'indexed_questions': QuestionSearch.objects.exclude(tsv__isnull=True).count(),
        'timestamp': str(timezone.now())
    })
