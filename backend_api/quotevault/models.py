from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


# PUBLIC_INTERFACE
class TimeStampedModel(models.Model):
    """Abstract base model providing created/updated timestamps.

    Notes:
        Keep this abstract model free of any logic that would access the Django
        app registry or execute queries at module import time.
    """
    created_at = models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")
    updated_at = models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")

    class Meta:
        abstract = True


# PUBLIC_INTERFACE
class Franchise(TimeStampedModel):
    """A movie, series or game that questions are drawn from."""
    CATEGORY_CHOICES = (
        ("movie", "Movie"),
        ("series", "Series"),
        ("game", "Game"),
    )

    title = models.CharField(max_length=200, help_text="Display title.")
    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES, default="movie", db_index=True)

    class Meta:
        ordering = ["title"]
        verbose_name = "Franchise"
        verbose_name_plural = "Franchises"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title} ({self.category})"


# PUBLIC_INTERFACE
class Question(TimeStampedModel):
    """One disclosable unit of content.

    Fields:
    - franchise: owning franchise
    - kind: quote (video + stop_time), character or banner (static image)
    - media_path: asset path relative to the QuoteVault media root
    - answer: canonical answer, matched case and punctuation insensitively
    - stop_time: seconds into the video where a quote clip pauses
    - base_clarity: calibrated hardest-visible pixelation level in [0, 1];
      set when authoring and never changed by gameplay
    """
    KIND_CHOICES = (
        ("quote", "Quote"),
        ("character", "Character"),
        ("banner", "Banner"),
    )

    franchise = models.ForeignKey(Franchise, on_delete=models.CASCADE, related_name="questions")
    kind = models.CharField(max_length=16, choices=KIND_CHOICES, db_index=True)
    media_path = models.CharField(max_length=255, help_text="Asset path relative to the media root.")
    answer = models.CharField(max_length=200, help_text="Canonical answer shown on solve.")
    stop_time = models.FloatField(null=True, blank=True, help_text="Quote clips pause here (seconds).")
    base_clarity = models.FloatField(
        default=0.02,
        validators=[MinValueValidator(0.0), MaxValueValidator(1.0)],
        help_text="Clarity shown with zero hints.",
    )

    class Meta:
        ordering = ["franchise", "kind", "id"]
        verbose_name = "Question"
        verbose_name_plural = "Questions"

    def clean(self) -> None:
        super().clean()
        if not (self.answer or "").strip():
            raise ValidationError({"answer": "Answer must not be blank."})

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.kind} #{self.pk}: {self.answer}"


# PUBLIC_INTERFACE
class ActivityRecord(TimeStampedModel):
    """A genuine solve, appended for analytics and recommendations.

    Skipped questions never produce a record.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quotevault_activity",
    )
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="activity")
    attempts = models.PositiveIntegerField(default=0)
    hints_used = models.PositiveIntegerField(default=0)
    time_taken = models.PositiveIntegerField(default=0, help_text="Seconds from serve to solve.")

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Activity Record"
        verbose_name_plural = "Activity Records"

    def __str__(self) -> str:  # pragma: no cover
        return f"Solve of question {self.question_id} by {self.user_id or 'anonymous'}"
