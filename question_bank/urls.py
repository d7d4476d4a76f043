"""
Question Bank URL Configuration
"""
from django.urls import path

from .views import (
    retrieve_questions_view,
    generate_questions_view,
    refine_search_view,
    explain_question_view,
    health_check,
)

urlpatterns = [
    # ========== QUESTION SEARCH ==========
    path('retrieve/', retrieve_questions_view, name='retrieve-questions'),
    path('generate/', generate_questions_view, name='generate-questions'),

    # ========== REFINEMENT & TUTORING ==========
    path('refine/', refine_search_view, name='refine-search'),
    path('explain/', explain_question_view, name='explain-question'),

    # ========== STATUS ==========
    path('health/', health_check, name='health-check'),
]
