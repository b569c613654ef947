"""
Comment threads: reply depth limit, derived counts and author projection
"""

import pytest

from conftest import make_comment, make_post, make_user, minutes_ago
from forum.core.exceptions import (
    AuthorNotFound,
    CommentNotFound,
    MaxDepthExceeded,
    ParentCommentNotFound,
    PostNotFound,
    ValidationFailedError,
)
from forum.models import Comment, Like
from forum.models.enums import LikeType
from forum.schemas.comment import AuthorField
from forum.services.comment import CommentService


def test_create_root_comment_has_zero_counts(db, post, bob):
    """A fresh comment reports zeros, not nulls"""
    service = CommentService(db)
    comment = service.create("First!", bob.id, post.id)

    assert comment.parent_comment_id is None
    assert comment.like_count == 0
    assert comment.dislike_count == 0
    assert comment.reply_count == 0
    assert comment.reply_ids == []
    assert comment.author == "Bob Jones"


def test_reply_depth_is_limited(db, post, alice, bob):
    """Replies can nest three levels below a root, never four"""
    service = CommentService(db)
    root = service.create("root", alice.id, post.id)
    r1 = service.create("r1", bob.id, post.id, root.id)
    r2 = service.create("r2", alice.id, post.id, r1.id)
    r3 = service.create("r3", bob.id, post.id, r2.id)

    assert service.get_reply_depth(root.id) == 0
    assert service.get_reply_depth(r1.id) == 1
    assert service.get_reply_depth(r3.id) == 3

    with pytest.raises(MaxDepthExceeded) as exc_info:
        service.create("r4", alice.id, post.id, r3.id)
    assert exc_info.value.status_code == 400
    assert "max 3" in exc_info.value.message

    # Nothing was written for the rejected reply
    assert db.query(Comment).count() == 4


def test_reply_depth_limit_is_configurable(db, post, alice):
    service = CommentService(db, max_reply_depth=1)
    root = service.create("root", alice.id, post.id)
    reply = service.create("reply", alice.id, post.id, root.id)

    with pytest.raises(MaxDepthExceeded):
        service.create("too deep", alice.id, post.id, reply.id)


def test_reply_count_only_counts_direct_replies(db, post, alice, bob):
    root = make_comment(db, alice, post, content="root", created_at=minutes_ago(10))
    child = make_comment(db, bob, post, parent=root, created_at=minutes_ago(9))
    make_comment(db, alice, post, parent=child, created_at=minutes_ago(8))

    response = CommentService(db).find_one_by("id", root.id)

    assert response.reply_count == 1
    assert response.reply_ids == [child.id]


def test_reply_ids_are_oldest_first(db, post, alice, bob):
    root = make_comment(db, alice, post, created_at=minutes_ago(10))
    late = make_comment(db, bob, post, parent=root, created_at=minutes_ago(1))
    early = make_comment(db, bob, post, parent=root, created_at=minutes_ago(5))

    response = CommentService(db).find_one_by("id", root.id)

    assert response.reply_ids == [early.id, late.id]


def test_post_listing_returns_roots_only(db, post, alice, bob):
    first = make_comment(db, alice, post, content="first", created_at=minutes_ago(10))
    second = make_comment(db, bob, post, content="second", created_at=minutes_ago(5))
    make_comment(db, bob, post, parent=first, created_at=minutes_ago(4))

    comments = CommentService(db).get_comments_by_post_id(post.id)

    assert [c.id for c in comments] == [first.id, second.id]
    assert comments[0].reply_count == 1
    assert comments[1].reply_count == 0


def test_replies_listing(db, post, alice, bob):
    root = make_comment(db, alice, post, created_at=minutes_ago(10))
    reply = make_comment(db, bob, post, parent=root, created_at=minutes_ago(9))
    make_comment(db, alice, post, parent=reply, created_at=minutes_ago(8))

    replies = CommentService(db).get_replies_by_comment_id(root.id)

    assert [r.id for r in replies] == [reply.id]
    assert replies[0].parent_comment_id == root.id


def test_comment_counts_reflect_likes(db, post, alice, bob):
    comment = make_comment(db, alice, post)
    carol = make_user(db, "carol")
    db.add_all(
        [
            Like(author_id=alice.id, comment_id=comment.id, type=LikeType.LIKE.value),
            Like(author_id=bob.id, comment_id=comment.id, type=LikeType.LIKE.value),
            Like(author_id=carol.id, comment_id=comment.id, type=LikeType.DISLIKE.value),
        ]
    )
    db.commit()

    response = CommentService(db).find_one_by("id", comment.id)

    assert response.like_count == 2
    assert response.dislike_count == 1


def test_author_projection(db, post, bob):
    """Create answers with the full name, single lookups with the id"""
    service = CommentService(db)
    created = service.create("hi", bob.id, post.id)
    assert created.author == "Bob Jones"

    by_id = service.find_one_by("id", created.id)
    assert by_id.author == bob.id

    by_name = service.find_one_by("id", created.id, author_field=AuthorField.FULL_NAME)
    assert by_name.author == "Bob Jones"

    listed = service.find_all_by("post_id", post.id)
    assert listed[0].author == "Bob Jones"


def test_create_requires_existing_author_and_post(db, post, alice):
    service = CommentService(db)

    with pytest.raises(AuthorNotFound):
        service.create("x", "missing-user", post.id)

    with pytest.raises(PostNotFound):
        service.create("x", alice.id, "missing-post")


def test_parent_must_exist_on_same_post(db, post, alice, tech):
    other_post = make_post(db, alice, [tech], title="Other")
    foreign_parent = make_comment(db, alice, other_post)
    service = CommentService(db)

    with pytest.raises(ParentCommentNotFound):
        service.create("x", alice.id, post.id, "missing-comment")

    with pytest.raises(ParentCommentNotFound):
        service.create("x", alice.id, post.id, foreign_parent.id)


def test_cycle_in_thread_is_reported(db, post, alice):
    a = make_comment(db, alice, post, content="a")
    b = make_comment(db, alice, post, parent=a, content="b")

    # Corrupt the thread so that a and b point at each other
    a.parent_comment_id = b.id
    db.commit()

    service = CommentService(db)
    with pytest.raises(ValidationFailedError):
        service.get_reply_depth(a.id)

    with pytest.raises(ValidationFailedError):
        service.create("reply", alice.id, post.id, b.id)


def test_reply_depth_of_missing_comment(db):
    with pytest.raises(CommentNotFound):
        CommentService(db).get_reply_depth("missing")


def test_lookup_field_is_whitelisted(db):
    service = CommentService(db)

    with pytest.raises(ValidationFailedError):
        service.find_one_by("content", "anything")

    with pytest.raises(ValidationFailedError):
        service.find_all_by("__class__", None)


def test_find_one_by_missing_returns_none(db):
    assert CommentService(db).find_one_by("id", "missing") is None


def test_update_changes_content_only(db, post, alice):
    comment = make_comment(db, alice, post, content="before")
    service = CommentService(db)

    updated = service.update("id", comment.id, content="after")

    assert updated.content == "after"
    assert updated.post_id == post.id
    assert updated.author == alice.id

    with pytest.raises(CommentNotFound):
        service.update("id", "missing", content="after")


def test_delete_removes_replies_and_likes(db, post, alice, bob):
    root = make_comment(db, alice, post)
    reply = make_comment(db, bob, post, parent=root)
    make_comment(db, alice, post, parent=reply)
    db.add(Like(author_id=bob.id, comment_id=reply.id, type=LikeType.LIKE.value))
    db.commit()

    service = CommentService(db)
    service.delete("id", root.id)
    db.expire_all()

    assert db.query(Comment).count() == 0
    assert db.query(Like).count() == 0

    with pytest.raises(CommentNotFound):
        service.delete("id", root.id)


def test_thread_scenario(db, alice, bob, tech):
    """Alice posts, Bob comments and answers himself, Alice likes Bob's comment"""
    from forum.services.like import LikeService, LikeTarget
    from forum.services.post import PostService

    post = PostService(db).create("Scenario", "Body", alice.id, [tech.id])
    comments = CommentService(db)
    root = comments.create("root", bob.id, post.id)
    comments.create("self reply", bob.id, post.id, root.id)
    LikeService(db).toggle(alice.id, LikeTarget.comment(root.id), LikeType.LIKE)

    roots = comments.get_comments_by_post_id(post.id)

    assert len(roots) == 1
    assert roots[0].id == root.id
    assert roots[0].like_count == 1
    assert roots[0].dislike_count == 0
    assert roots[0].reply_count == 1
