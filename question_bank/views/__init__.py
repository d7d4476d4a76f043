from .question_search import retrieve_questions_view, generate_questions_view
from .refinement import refine_search_view
from .explanation import explain_question_view
from .status_views import health_check

__all__ = [
    # question search
    'retrieve_questions_view',
    'generate_questions_view',

    # search refinement
    'refine_search_view',

    # explanations
    'explain_question_view',

    # status
    'health_check',
]
