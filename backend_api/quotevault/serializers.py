from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from .models import Franchise


STATUS_CHOICES = ["IN_PROGRESS", "SOLVED", "SKIPPED"]
MODE_CHOICES = ["text", "image", "puzzle"]


# PUBLIC_INTERFACE
class RandomContentRequestSerializer(serializers.Serializer):
    """Query parameters for the question feed."""

    category = serializers.ChoiceField(
        required=False,
        choices=[c for c, _ in Franchise.CATEGORY_CHOICES],
        default="movie",
    )


# PUBLIC_INTERFACE
class DisclosureSerializer(serializers.Serializer):
    """What the player currently sees for a question."""

    mode = serializers.ChoiceField(choices=MODE_CHOICES)
    clarity_level = serializers.FloatField(allow_null=True)
    tier = serializers.IntegerField(allow_null=True)
    revealed = serializers.BooleanField()
    hint_available = serializers.BooleanField()


# PUBLIC_INTERFACE
class ServedQuestionSerializer(serializers.Serializer):
    """One question in the feed response. The answer is never included."""

    question_id = serializers.IntegerField()
    kind = serializers.CharField()
    media_url = serializers.CharField()
    image_url = serializers.CharField(allow_null=True)
    stop_time = serializers.FloatField(allow_null=True)
    base_clarity = serializers.FloatField()
    disclosure = DisclosureSerializer()


# PUBLIC_INTERFACE
class RandomContentResponseSerializer(serializers.Serializer):
    """Question feed response: a franchise and one question per kind."""

    franchise_id = serializers.IntegerField()
    title = serializers.CharField()
    category = serializers.CharField()
    questions = serializers.DictField(child=ServedQuestionSerializer(allow_null=True))


# PUBLIC_INTERFACE
class ProgressResponseSerializer(serializers.Serializer):
    """Per-question play state."""

    question_id = serializers.IntegerField()
    kind = serializers.CharField()
    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    attempts = serializers.IntegerField()
    hints_used = serializers.IntegerField()
    disclosure = DisclosureSerializer()
    score = serializers.IntegerField()
    canonical_answer = serializers.CharField(allow_null=True)


# PUBLIC_INTERFACE
class GuessRequestSerializer(serializers.Serializer):
    """Request payload to submit a typed guess. Blank guesses are rejected here."""

    guess = serializers.CharField(max_length=200)


# PUBLIC_INTERFACE
class GuessResponseSerializer(serializers.Serializer):
    """Response payload after submitting a guess."""

    correct = serializers.BooleanField()
    canonical_answer = serializers.CharField(allow_null=True)
    auto_hint = serializers.BooleanField()
    progress = ProgressResponseSerializer()


# PUBLIC_INTERFACE
class HintResponseSerializer(serializers.Serializer):
    """Response payload for a hint request."""

    granted = serializers.BooleanField()
    progress = ProgressResponseSerializer()


# PUBLIC_INTERFACE
class TileSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    letter = serializers.CharField()
    locked = serializers.BooleanField()


# PUBLIC_INTERFACE
class PuzzleRequestSerializer(serializers.Serializer):
    """Optional explicit tier; omitted means the player's current puzzle."""

    tier = serializers.IntegerField(required=False, min_value=1, max_value=4)


# PUBLIC_INTERFACE
class PuzzleResponseSerializer(serializers.Serializer):
    """Word groups of tiles in slot order."""

    question_id = serializers.IntegerField()
    tier = serializers.IntegerField()
    groups = serializers.ListField(child=serializers.ListField(child=TileSerializer()))


# PUBLIC_INTERFACE
class SwapRequestSerializer(serializers.Serializer):
    """Drag source and drop target tile ids."""

    source = serializers.IntegerField(min_value=0)
    target = serializers.IntegerField(min_value=0)


# PUBLIC_INTERFACE
class ImageRequestSerializer(serializers.Serializer):
    """Render request: an explicit clarity level, a hint count, or neither.

    Range checks are left to the hint engine so that bad levels come back as
    InvalidLevel errors rather than being clamped.
    """

    level = serializers.FloatField(required=False)
    hint = serializers.IntegerField(required=False)


# PUBLIC_INTERFACE
class CheckAnswerRequestSerializer(serializers.Serializer):
    """Stateless verify request for clients that track their own progress."""

    question_id = serializers.IntegerField()
    guess = serializers.CharField(max_length=200)
    attempts = serializers.IntegerField(required=False, min_value=0, default=0)
    hints_used = serializers.IntegerField(required=False, min_value=0, default=0)
    time_taken = serializers.IntegerField(required=False, min_value=0, default=0)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        attrs["guess"] = attrs["guess"].strip()
        return attrs


# PUBLIC_INTERFACE
class CheckAnswerResponseSerializer(serializers.Serializer):
    correct = serializers.BooleanField()
    canonical_answer = serializers.CharField(allow_null=True)
