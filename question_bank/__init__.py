"""
Question Bank Module

Question retrieval over the full-text index, language-model question
generation, search refinement dialogue and answer explanations.
"""
