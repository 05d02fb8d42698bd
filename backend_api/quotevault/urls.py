from django.urls import path
from .views import (
    health,
    random_content,
    question_progress,
    submit_guess,
    request_hint,
    skip_question,
    get_puzzle,
    swap_tiles,
    submit_puzzle,
    question_image,
    check_answer,
    get_kinds,
    get_categories,
)

urlpatterns = [
    path('health/', health, name='Health'),
    path('content/random', random_content, name='random-content'),
    path('questions/<int:question_id>', question_progress, name='question-progress'),
    path('questions/<int:question_id>/guess', submit_guess, name='question-guess'),
    path('questions/<int:question_id>/hint', request_hint, name='question-hint'),
    path('questions/<int:question_id>/skip', skip_question, name='question-skip'),
    path('questions/<int:question_id>/puzzle', get_puzzle, name='question-puzzle'),
    path('questions/<int:question_id>/puzzle/swap', swap_tiles, name='question-puzzle-swap'),
    path('questions/<int:question_id>/puzzle/submit', submit_puzzle, name='question-puzzle-submit'),
    path('questions/<int:question_id>/image', question_image, name='question-image'),
    path('check-answer', check_answer, name='check-answer'),
    path('kinds', get_kinds, name='get-kinds'),
    path('categories', get_categories, name='get-categories'),
]
