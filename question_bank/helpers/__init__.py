"""
Question bank helpers package.
"""

from .study_prompts import study_prompt_manager, StudyPromptManager

__all__ = [
    'study_prompt_manager',
    'StudyPromptManager'
]
