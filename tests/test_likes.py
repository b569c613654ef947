"""
Reactions: toggle semantics, one reaction per user and target, counting
"""

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import make_comment
from forum.core.exceptions import (
    CommentNotFound,
    ConflictError,
    InvalidLikeTarget,
    LikeNotFound,
    PostNotFound,
)
from forum.models import Like
from forum.models.enums import LikeType
from forum.services.like import LikeService, LikeTarget, ToggleAction


def test_toggle_cycle_on_post(db, post, bob):
    service = LikeService(db)
    target = LikeTarget.post(post.id)

    action, like = service.toggle(bob.id, target, LikeType.LIKE)
    assert action == ToggleAction.CREATED
    assert like.type == LikeType.LIKE.value
    assert service.count_likes_dislikes_by_target(post_id=post.id) == {"likes": 1, "dislikes": 0}

    action, like = service.toggle(bob.id, target, LikeType.LIKE)
    assert action == ToggleAction.REMOVED
    assert like is None
    assert service.count_likes_dislikes_by_target(post_id=post.id) == {"likes": 0, "dislikes": 0}

    service.toggle(bob.id, target, LikeType.LIKE)
    action, like = service.toggle(bob.id, target, LikeType.DISLIKE)
    assert action == ToggleAction.UPDATED
    assert like.type == LikeType.DISLIKE.value
    assert service.count_likes_dislikes_by_target(post_id=post.id) == {"likes": 0, "dislikes": 1}

    assert db.query(Like).filter(Like.author_id == bob.id).count() == 1


def test_toggle_on_comment(db, post, alice, bob):
    comment = make_comment(db, alice, post)
    service = LikeService(db)

    action, _ = service.toggle(bob.id, LikeTarget.comment(comment.id), LikeType.DISLIKE)

    assert action == ToggleAction.CREATED
    assert service.count_likes_for_target(comment.id, "comment", LikeType.DISLIKE) == 1
    assert service.count_likes_for_target(comment.id, "comment", LikeType.LIKE) == 0
    # A reaction on a comment is not a reaction on its post
    assert service.count_likes_for_target(post.id, "post", LikeType.DISLIKE) == 0


def test_toggle_requires_existing_target(db, post, bob):
    service = LikeService(db)

    with pytest.raises(PostNotFound):
        service.toggle(bob.id, LikeTarget.post("missing"), LikeType.LIKE)

    with pytest.raises(CommentNotFound):
        service.toggle(bob.id, LikeTarget.comment("missing"), LikeType.LIKE)

    assert db.query(Like).count() == 0


def test_same_user_can_react_to_post_and_comment(db, post, alice, bob):
    comment = make_comment(db, alice, post)
    service = LikeService(db)

    service.create(bob.id, LikeTarget.post(post.id), LikeType.LIKE)
    service.create(bob.id, LikeTarget.comment(comment.id), LikeType.LIKE)

    assert len(service.find_all_by("author_id", bob.id)) == 2


def test_second_reaction_is_a_conflict(db, post, bob):
    service = LikeService(db)
    service.create(bob.id, LikeTarget.post(post.id), LikeType.LIKE)

    with pytest.raises(ConflictError):
        service.create(bob.id, LikeTarget.post(post.id), LikeType.DISLIKE)

    assert db.query(Like).count() == 1


def test_like_must_have_exactly_one_target(db, post, alice, bob):
    comment = make_comment(db, alice, post)

    db.add(Like(author_id=bob.id, type=LikeType.LIKE.value))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    db.add(
        Like(author_id=bob.id, post_id=post.id, comment_id=comment.id, type=LikeType.LIKE.value)
    )
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_find_user_like_for_target(db, post, alice, bob):
    service = LikeService(db)
    service.create(bob.id, LikeTarget.post(post.id), LikeType.DISLIKE)

    like = service.find_user_like_for_target(bob.id, post_id=post.id)
    assert like.type == LikeType.DISLIKE.value
    assert service.find_user_like_for_target(alice.id, post_id=post.id) is None

    with pytest.raises(InvalidLikeTarget):
        service.find_user_like_for_target(bob.id)

    with pytest.raises(InvalidLikeTarget):
        service.find_user_like_for_target(bob.id, post_id=post.id, comment_id="x")


def test_count_for_invalid_target_kind(db, post):
    with pytest.raises(InvalidLikeTarget):
        LikeService(db).count_likes_for_target(post.id, "user", LikeType.LIKE)


def test_like_target_values():
    assert LikeTarget.post("p1").as_columns() == {"post_id": "p1", "comment_id": None}
    assert LikeTarget.comment("c1").as_columns() == {"post_id": None, "comment_id": "c1"}

    with pytest.raises(InvalidLikeTarget):
        LikeTarget("category", "x")

    with pytest.raises(InvalidLikeTarget):
        LikeTarget.post("")


def test_update_type_and_delete(db, post, bob):
    service = LikeService(db)
    like = service.create(bob.id, LikeTarget.post(post.id), LikeType.LIKE)

    updated = service.update_type(like.id, LikeType.DISLIKE)
    assert updated.type == LikeType.DISLIKE.value

    service.delete(like.id)
    assert service.find_one_by("id", like.id) is None

    with pytest.raises(LikeNotFound):
        service.delete(like.id)

    with pytest.raises(LikeNotFound):
        service.update_type(like.id, LikeType.LIKE)
