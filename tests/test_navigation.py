import pytest

from judging.core.exceptions import RatingRequiredError, ReviewSaveError, SubmissionNotFoundError
from judging.services.review_session import ReviewSession

from conftest import make_submission, settle


@pytest.fixture
def submissions():
    return [
        make_submission("s1", rating=6, feedback="nice", minutes=0),
        make_submission("s2", minutes=1),
        make_submission("s3", rating=8, minutes=2),
        make_submission("s4", minutes=3),
    ]


@pytest.fixture
async def session(submissions, score_store, scheduler):
    session = ReviewSession(submissions, score_store, scheduler=scheduler, debounce_seconds=1.5)
    await session.start("s2")
    yield session
    session.controller.close()


async def test_forward_refused_without_rating(session, score_store):
    with pytest.raises(RatingRequiredError):
        await session.navigate_next()

    assert session.current.id == "s2"
    assert session.rating_warning
    assert score_store.calls == []


async def test_warning_clears_when_rating_selected(session):
    with pytest.raises(RatingRequiredError):
        await session.navigate_next()

    session.rating_selected(4)

    assert not session.rating_warning


async def test_next_unreviewed_also_requires_rating(session):
    with pytest.raises(RatingRequiredError):
        await session.navigate_next_unreviewed()


async def test_backward_allowed_without_rating_and_flushes_feedback(session, score_store):
    session.feedback_changed("still thinking")

    previous = await session.navigate_previous()

    assert previous.id == "s1"
    assert score_store.calls == [("s2", None, "still thinking")]
    assert session.controller.local_rating == 6
    assert session.controller.local_feedback == "nice"


async def test_next_waits_for_pending_edits(session, score_store, scheduler):
    session.rating_selected(7)
    session.feedback_changed("good pacing")

    nxt = await session.navigate_next()

    assert nxt.id == "s3"
    assert score_store.calls[-1] == ("s2", 7, "good pacing")
    assert score_store.max_outstanding == 1
    assert not session.controller.has_pending_debounce
    scheduler.advance(5)
    await settle()
    assert score_store.calls[-1] == ("s2", 7, "good pacing")


async def test_next_unreviewed_skips_scored_submissions(session):
    session.rating_selected(5)

    target = await session.navigate_next_unreviewed()

    assert target.id == "s4"


async def test_returning_shows_what_was_saved(session):
    session.rating_selected(9)
    await session.navigate_next()
    await session.navigate_previous()

    assert session.current.id == "s2"
    assert session.controller.local_rating == 9


async def test_failed_flush_keeps_judge_on_submission(session, score_store):
    score_store.fail = True
    session.feedback_changed("unsaved")

    with pytest.raises(ReviewSaveError):
        await session.navigate_previous()

    assert session.current.id == "s2"
    assert session.controller.local_feedback == "unsaved"


async def test_edges_return_none(session):
    await session.navigate_previous()
    assert await session.navigate_previous() is None
    assert session.current.id == "s1"


async def test_last_submission_has_no_next(submissions, score_store, scheduler):
    session = ReviewSession(submissions, score_store, scheduler=scheduler)
    await session.start("s4")

    assert session.gate.is_last
    assert await session.navigate_next() is None
    assert not session.rating_warning


async def test_arrow_keys_use_the_same_gate(session):
    with pytest.raises(RatingRequiredError):
        await session.key_pressed("ArrowRight")

    moved = await session.key_pressed("ArrowLeft")
    assert moved.id == "s1"


async def test_arrow_keys_ignored_while_typing(session):
    assert await session.key_pressed("ArrowLeft", target_tag="textarea") is None
    assert await session.key_pressed("Enter") is None
    assert session.current.id == "s2"


async def test_unknown_submission_is_not_found(submissions, score_store, scheduler):
    session = ReviewSession(submissions, score_store, scheduler=scheduler)

    with pytest.raises(SubmissionNotFoundError):
        await session.start("missing")


async def test_progress_counts_scores_saved_this_session(session):
    assert session.progress.reviewed == 2

    session.rating_selected(3)
    await settle()

    progress = session.progress
    assert progress.reviewed == 3
    assert progress.pending == 1
    assert progress.percentage == 75
