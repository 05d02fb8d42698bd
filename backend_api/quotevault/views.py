from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.cache import cache
from django.http import HttpResponse
from django.urls import reverse
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from PIL import Image
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .activity import DatabaseActivityLog
from .conf import get_setting, media_root
from .disclosure import (
    AssetNotFound,
    DisclosureRegistry,
    InvalidLevel,
    MalformedAnswer,
    PlayProgress,
    ProgressClosed,
    PuzzleUnavailable,
    TileLocked,
    answers_match,
    build_puzzle,
    is_image_kind,
    pixelate,
    resolve_clarity,
    sniff_content_type,
)
from .disclosure.levels import REVEAL_THRESHOLD
from .models import Franchise, Question
from .progress_store import discard_all, load_or_start_progress, save_progress, start_progress
from .serializers import (
    CheckAnswerRequestSerializer,
    CheckAnswerResponseSerializer,
    GuessRequestSerializer,
    GuessResponseSerializer,
    HintResponseSerializer,
    ImageRequestSerializer,
    ProgressResponseSerializer,
    PuzzleRequestSerializer,
    PuzzleResponseSerializer,
    RandomContentRequestSerializer,
    RandomContentResponseSerializer,
    SwapRequestSerializer,
)

logger = logging.getLogger(__name__)


def _get_question(question_id: int) -> Optional[Question]:
    return Question.objects.select_related("franchise").filter(pk=question_id).first()


def _question_not_found() -> Response:
    return Response({"error": "Question not found."}, status=status.HTTP_404_NOT_FOUND)


def _miscalibrated(question: Question, exc: InvalidLevel) -> Response:
    logger.warning("Question %s has an invalid disclosure calibration: %s", question.pk, exc)
    return Response({"error": str(exc)}, status=status.HTTP_422_UNPROCESSABLE_ENTITY)


def _progress_payload(progress: PlayProgress) -> Dict[str, Any]:
    return {
        "question_id": progress.question_id,
        "kind": progress.kind,
        "status": progress.status,
        "attempts": progress.attempts,
        "hints_used": progress.hints_used,
        "disclosure": progress.disclosure().to_dict(),
        "score": progress.score(get_setting("POINTS_BASE"), get_setting("HINT_PENALTY")),
        "canonical_answer": progress.answer if progress.solved else None,
    }


def _asset_path(question: Question) -> Path:
    """Resolve a question's media under the media root, refusing paths that escape it."""
    root = media_root().resolve()
    path = (root / question.media_path).resolve()
    if root not in path.parents:
        raise AssetNotFound(f"Media path {question.media_path!r} is outside the media root.")
    return path


def _served_question(question: Question, progress: PlayProgress) -> Dict[str, Any]:
    image_url = None
    if is_image_kind(question.kind):
        image_url = reverse("question-image", kwargs={"question_id": question.pk})
    return {
        "question_id": question.pk,
        "kind": question.kind,
        "media_url": f"{settings.MEDIA_URL}{question.media_path}",
        "image_url": image_url,
        "stop_time": question.stop_time,
        "base_clarity": question.base_clarity,
        "disclosure": progress.disclosure().to_dict(),
    }


# PUBLIC_INTERFACE
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def health(request):
    """Health check endpoint for the API.

    Returns:
    - 200 OK with {"message": "Server is up!"}
    """
    return Response({"message": "Server is up!"})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="random_content",
    operation_summary="Serve a random franchise",
    operation_description="""
Pick a random franchise of the requested category and one question of each kind.
All previous progress of the player is discarded and fresh progress is created
for every served question. Answers are not included.

Query params:
- category (optional, default 'movie'): movie | series | game
""",
    query_serializer=RandomContentRequestSerializer,
    responses={200: RandomContentResponseSerializer},
    tags=["game"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def random_content(request):
    """Serve the next question set and reset the player's progress."""
    params = RandomContentRequestSerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    category = params.validated_data.get("category", "movie")

    franchise = (
        Franchise.objects.filter(category=category, pk__in=Question.objects.values("franchise_id"))
        .order_by("?")
        .first()
    )
    if not franchise:
        return Response(
            {"error": f"No content available for category {category!r}."},
            status=status.HTTP_404_NOT_FOUND,
        )

    discard_all(request)
    served: Dict[str, Optional[Dict[str, Any]]] = {}
    for kind in DisclosureRegistry.kinds():
        question = franchise.questions.filter(kind=kind).order_by("?").first()
        if question is None:
            served[kind] = None
            continue
        progress = start_progress(request, question)
        try:
            served[kind] = _served_question(question, progress)
        except InvalidLevel as e:
            return _miscalibrated(question, e)

    resp = {
        "franchise_id": franchise.id,
        "title": franchise.title,
        "category": franchise.category,
        "questions": served,
    }
    return Response(RandomContentResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="question_progress",
    operation_summary="Get play progress for a question",
    responses={200: ProgressResponseSerializer},
    tags=["game"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def question_progress(request, question_id: int):
    """Current status, attempts, hints and disclosure for a question."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    progress = load_or_start_progress(request, question)
    try:
        payload = _progress_payload(progress)
    except InvalidLevel as e:
        return _miscalibrated(question, e)
    return Response(ProgressResponseSerializer(payload).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="submit_guess",
    operation_summary="Submit a typed guess",
    operation_description="""
Verify a guess against the canonical answer. Matching ignores case, spaces,
punctuation and anything that is not an ASCII letter or digit. Every guess
counts as an attempt; repeated wrong guesses trigger a free hint.

Request body:
- guess (string, required, non-blank)
""",
    request_body=GuessRequestSerializer,
    responses={200: GuessResponseSerializer},
    tags=["game"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def submit_guess(request, question_id: int):
    """Verify a guess and advance the question's state machine."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    serializer = GuessRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)

    progress = load_or_start_progress(request, question)
    try:
        outcome = progress.submit_guess(
            serializer.validated_data["guess"],
            activity_log=DatabaseActivityLog(request.user),
        )
        payload = _progress_payload(progress)
    except ProgressClosed as e:
        return Response({"error": str(e)}, status=status.HTTP_409_CONFLICT)
    except InvalidLevel as e:
        return _miscalibrated(question, e)
    except MalformedAnswer as e:
        return Response({"error": str(e)}, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
    save_progress(request, progress)

    resp = {
        "correct": outcome.correct,
        "canonical_answer": outcome.canonical_answer,
        "auto_hint": outcome.auto_hint,
        "progress": payload,
    }
    return Response(GuessResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="request_hint",
    operation_summary="Request a hint for a question",
    operation_description="""
Spend one hint. Image questions gain clarity until fully revealed, then switch
to a letter puzzle; quote questions go straight to the puzzle and tighten it
up to tier 4. At the ceiling, or once solved, the request changes nothing and
returns granted=false.
""",
    responses={200: HintResponseSerializer},
    tags=["game", "hints"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def request_hint(request, question_id: int):
    """Provide a hint for the given question, enforcing the hint ceiling."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    progress = load_or_start_progress(request, question)
    try:
        granted = progress.request_hint()
        payload = _progress_payload(progress)
    except InvalidLevel as e:
        return _miscalibrated(question, e)
    except MalformedAnswer as e:
        return Response({"error": str(e)}, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
    save_progress(request, progress)
    resp = {"granted": granted, "progress": payload}
    return Response(HintResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="skip_question",
    operation_summary="Give up on a question",
    operation_description="Finish the question without scoring and reveal the canonical answer.",
    responses={200: ProgressResponseSerializer},
    tags=["game"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def skip_question(request, question_id: int):
    """Skip: terminal, non-scoring, never logged as a solve."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    progress = load_or_start_progress(request, question)
    progress.skip()
    save_progress(request, progress)
    try:
        payload = _progress_payload(progress)
    except InvalidLevel as e:
        return _miscalibrated(question, e)
    return Response(ProgressResponseSerializer(payload).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_puzzle",
    operation_summary="Get the letter puzzle for a question",
    operation_description="""
Without parameters, returns the puzzle unlocked by the player's hints (409 if
none is unlocked yet). With an explicit tier, builds a fresh puzzle at that
tier without touching the player's progress.
""",
    query_serializer=PuzzleRequestSerializer,
    responses={200: PuzzleResponseSerializer},
    tags=["puzzle"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_puzzle(request, question_id: int):
    """Word groups of letter tiles for a question."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    params = PuzzleRequestSerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    tier = params.validated_data.get("tier")

    try:
        if tier is not None:
            puzzle = build_puzzle(question.answer, tier)
        else:
            puzzle = load_or_start_progress(request, question).puzzle
    except MalformedAnswer as e:
        return Response({"error": str(e)}, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
    if puzzle is None:
        return Response({"error": "No puzzle unlocked for this question."}, status=status.HTTP_409_CONFLICT)

    resp = {"question_id": question.pk, **puzzle.to_dict()}
    return Response(PuzzleResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="swap_tiles",
    operation_summary="Swap two puzzle tiles",
    operation_description="""
Drop the source tile onto the target tile; the two exchange slots. Locked
tiles can be neither source nor target.

Request body:
- source (int): tile id being dragged
- target (int): tile id it is dropped on
""",
    request_body=SwapRequestSerializer,
    responses={200: PuzzleResponseSerializer},
    tags=["puzzle"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def swap_tiles(request, question_id: int):
    """Apply one drag-and-drop swap to the player's puzzle."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    serializer = SwapRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)

    progress = load_or_start_progress(request, question)
    if progress.solved:
        return Response({"error": "Question already finished."}, status=status.HTTP_409_CONFLICT)
    if progress.puzzle is None:
        return Response({"error": "No puzzle unlocked for this question."}, status=status.HTTP_409_CONFLICT)

    try:
        progress.puzzle.begin_drag(serializer.validated_data["source"])
        progress.puzzle.complete_drop(serializer.validated_data["source"], serializer.validated_data["target"])
    except TileLocked as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except KeyError as e:
        return Response({"error": e.args[0]}, status=status.HTTP_400_BAD_REQUEST)
    save_progress(request, progress)

    resp = {"question_id": question.pk, **progress.puzzle.to_dict()}
    return Response(PuzzleResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="submit_puzzle",
    operation_summary="Submit the current tile arrangement",
    responses={200: GuessResponseSerializer},
    tags=["puzzle"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def submit_puzzle(request, question_id: int):
    """Concatenate the tiles in slot order and verify them as a guess."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    progress = load_or_start_progress(request, question)
    try:
        outcome = progress.submit_puzzle(activity_log=DatabaseActivityLog(request.user))
        payload = _progress_payload(progress)
    except (ProgressClosed, PuzzleUnavailable) as e:
        return Response({"error": str(e)}, status=status.HTTP_409_CONFLICT)
    except InvalidLevel as e:
        return _miscalibrated(question, e)
    save_progress(request, progress)

    resp = {
        "correct": outcome.correct,
        "canonical_answer": outcome.canonical_answer,
        "auto_hint": outcome.auto_hint,
        "progress": payload,
    }
    return Response(GuessResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="question_image",
    operation_summary="Render a pixelated question image",
    operation_description="""
Render the question's image at a clarity level. An explicit level wins over a
hint count; with neither, the player's current hint count is used.

Query params:
- level (float, optional): clarity in [0, 1]; >= 0.95 returns the original image
- hint (int, optional): hint count combined with the question's base clarity
""",
    query_serializer=ImageRequestSerializer,
    responses={200: openapi.Response("Image bytes"), 400: "Invalid level", 404: "Image unavailable"},
    tags=["render"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def question_image(request, question_id: int):
    """Pixelated image render, cached per (question, media, rounded clarity)."""
    question = _get_question(question_id)
    if question is None:
        return _question_not_found()
    if not is_image_kind(question.kind):
        return Response({"error": "Question has no image."}, status=status.HTTP_400_BAD_REQUEST)
    params = ImageRequestSerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    level = params.validated_data.get("level")
    hint = params.validated_data.get("hint")
    if level is None and hint is None:
        hint = load_or_start_progress(request, question).hints_used

    try:
        clarity = resolve_clarity(clarity=level, hints_used=hint, base_clarity=question.base_clarity)
    except InvalidLevel as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    image_format = get_setting("RENDER_FORMAT").upper()
    level_key = "full" if clarity >= REVEAL_THRESHOLD else f"{clarity:.2f}"
    cache_key = f"quotevault:render:{question.pk}:{question.media_path}:{level_key}:{image_format}"
    cached = cache.get(cache_key)
    if cached is None:
        try:
            data = pixelate(
                _asset_path(question),
                clarity,
                image_format=image_format,
                quality=get_setting("RENDER_QUALITY"),
            )
        except AssetNotFound as e:
            logger.warning("Render of question %s failed: %s", question.pk, e)
            return Response({"error": "Image unavailable."}, status=status.HTTP_404_NOT_FOUND)
        if clarity >= REVEAL_THRESHOLD:
            content_type = sniff_content_type(data)
        else:
            content_type = Image.MIME.get(image_format, "application/octet-stream")
        cached = (data, content_type)
        cache.set(cache_key, cached, get_setting("RENDER_CACHE_TIMEOUT"))

    data, content_type = cached
    return HttpResponse(data, content_type=content_type)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="check_answer",
    operation_summary="Verify an answer (stateless)",
    operation_description="""
Verify a guess for clients that track attempts and hints themselves. A correct
answer is logged as a solve with the supplied counters.

Request body:
- question_id (int, required)
- guess (string, required)
- attempts, hints_used, time_taken (int, optional)
""",
    request_body=CheckAnswerRequestSerializer,
    responses={200: CheckAnswerResponseSerializer},
    tags=["game"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def check_answer(request):
    """Compare a guess with a question's answer without touching session progress."""
    serializer = CheckAnswerRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data

    question = _get_question(vd["question_id"])
    if question is None:
        return _question_not_found()

    correct = answers_match(vd["guess"], question.answer)
    if correct:
        DatabaseActivityLog(request.user).record(
            question.pk, vd["attempts"], vd["hints_used"], vd["time_taken"]
        )
    resp = {"correct": correct, "canonical_answer": question.answer if correct else None}
    return Response(CheckAnswerResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_kinds",
    operation_summary="List question kinds",
    tags=["meta"],
    responses={200: openapi.Response("OK", schema=openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Items(type=openapi.TYPE_STRING)))},
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_kinds(request):
    """List supported question kinds."""
    return Response(DisclosureRegistry.kinds(), status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_categories",
    operation_summary="List franchise categories",
    tags=["meta"],
    responses={200: openapi.Response("OK", schema=openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Items(type=openapi.TYPE_STRING)))},
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_categories(request):
    """List franchise categories."""
    return Response([c for c, _ in Franchise.CATEGORY_CHOICES], status=status.HTTP_200_OK)
