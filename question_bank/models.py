import uuid

from django.conf import settings
from django.contrib.postgres.search import SearchVectorField
from django.db import models


class Subject(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Topic(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    subject = models.ForeignKey(
        Subject, on_delete=models.SET_NULL, related_name='topics', null=True, blank=True
    )
    parent_topic = models.ForeignKey(
        'self', on_delete=models.SET_NULL, related_name='children', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['subject__name', 'name']

    def __str__(self):
        return f"{self.subject} / {self.name}" if self.subject else self.name


class Question(models.Model):
    MULTIPLE_SINGLE = 'multiple_single'
    MULTIPLE_MULTI = 'multiple_multi'
    TRUE_FALSE = 'true_false'
    OPEN = 'open'

    TYPE_CHOICES = [
        (MULTIPLE_SINGLE, 'Multiple choice (single answer)'),
        (MULTIPLE_MULTI, 'Multiple choice (multiple answers)'),
        (TRUE_FALSE, 'True / False'),
        (OPEN, 'Open'),
    ]

    DIFFICULTY_CHOICES = [
        ('easy', 'Easy'),
        ('medium', 'Medium'),
        ('hard', 'Hard'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='questions',
        null=True,
        blank=True,
    )
    subject = models.ForeignKey(
        Subject, on_delete=models.SET_NULL, related_name='questions', null=True, blank=True
    )
    topic = models.ForeignKey(
        Topic, on_delete=models.SET_NULL, related_name='questions', null=True, blank=True
    )

    stem = models.TextField()
    stem_image_path = models.CharField(max_length=500, blank=True, null=True)  # object storage key
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=MULTIPLE_SINGLE)
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES, null=True, blank=True)

    # Provenance
    source = models.CharField(max_length=255, blank=True, null=True)
    institution = models.CharField(max_length=255, blank=True, null=True)
    board = models.CharField(max_length=255, blank=True, null=True)
    role = models.CharField(max_length=255, blank=True, null=True)
    year = models.PositiveSmallIntegerField(null=True, blank=True)

    explanation = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['board'], name='question_ba_board_0f5a1c_idx'),
            models.Index(fields=['institution'], name='question_ba_institu_6b2e4d_idx'),
            models.Index(fields=['created_at'], name='question_ba_created_9c3d7e_idx'),
        ]

    def __str__(self):
        board = f"[{self.board}] " if self.board else ""
        return f"{board}{self.stem[:50]}..."

    def choice_problems(self, choices=None):
        # Returns a list of human-readable violations of the choice invariants.
        # `choices` lets callers validate unsaved rows (admin formsets).
        if choices is None:
            choices = list(self.choices.all())

        problems = []
        if self.type == self.OPEN:
            return problems

        if not choices:
            problems.append('Questões objetivas precisam de ao menos uma alternativa.')
            return problems

        correct = sum(1 for c in choices if c.is_correct)
        if self.type in (self.MULTIPLE_SINGLE, self.TRUE_FALSE) and correct != 1:
            problems.append(f'Esperada exatamente uma alternativa correta, encontradas {correct}.')
        elif self.type == self.MULTIPLE_MULTI and correct < 1:
            problems.append('Questões de múltiplas respostas precisam de ao menos uma alternativa correta.')

        positions = [c.position for c in choices]
        if len(positions) != len(set(positions)):
            problems.append('Posições das alternativas devem ser únicas.')
        return problems


class Choice(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name='choices')
    label = models.CharField(max_length=10)
    content = models.TextField()
    image_path = models.CharField(max_length=500, blank=True, null=True)
    is_correct = models.BooleanField(default=False)
    position = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(fields=['question', 'position'], name='uniq_choice_position_per_question'),
        ]

    def __str__(self):
        return f"{self.label}) {self.content[:40]}"


class QuestionSearch(models.Model):
    # Searchable projection of a question; kept in sync by helpers.search_index
    question = models.OneToOneField(
        Question, on_delete=models.CASCADE, primary_key=True, related_name='search_entry'
    )
    tsv = SearchVectorField(null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'question_bank_question_search'

    def __str__(self):
        return f"search entry for {self.question_id}"
