from __future__ import annotations

from typing import Optional

from .disclosure.progress import PlayProgress
from .models import Question

SESSION_KEY = "quotevault.progress"


def _bucket(request) -> dict:
    return request.session.setdefault(SESSION_KEY, {})


# PUBLIC_INTERFACE
def start_progress(request, question: Question) -> PlayProgress:
    """Create fresh progress for a question that is being served."""
    progress = PlayProgress(
        question_id=question.pk,
        kind=question.kind,
        answer=question.answer,
        base_clarity=question.base_clarity,
    )
    save_progress(request, progress)
    return progress


# PUBLIC_INTERFACE
def load_progress(request, question: Question) -> Optional[PlayProgress]:
    """Progress of the current player for a question, or None if it was never served."""
    data = _bucket(request).get(str(question.pk))
    if data is None:
        return None
    return PlayProgress.from_dict(data)


# PUBLIC_INTERFACE
def load_or_start_progress(request, question: Question) -> PlayProgress:
    return load_progress(request, question) or start_progress(request, question)


# PUBLIC_INTERFACE
def save_progress(request, progress: PlayProgress) -> None:
    _bucket(request)[str(progress.question_id)] = progress.to_dict()
    request.session.modified = True


# PUBLIC_INTERFACE
def discard_all(request) -> None:
    """Drop every progress entry; called when the player moves on."""
    request.session[SESSION_KEY] = {}
