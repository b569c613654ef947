"""
End-to-end flows through the HTTP API
"""

from conftest import auth_headers, make_comment, make_post, make_user


def test_health(client):
    assert client.get("/").json()["status"] == "healthy"

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
    assert response.json()["redis"] == "disabled"
    assert "X-Request-ID" in response.headers


def test_forum_scenario(client, alice, bob, admin):
    alice_headers = auth_headers(alice)
    bob_headers = auth_headers(bob)
    admin_headers = auth_headers(admin)

    # Only admins manage categories
    assert (
        client.post("/categories/", json={"title": "Tech"}, headers=alice_headers).status_code
        == 403
    )
    category = client.post("/categories/", json={"title": "Tech"}, headers=admin_headers)
    assert category.status_code == 201
    category_id = category.json()["id"]

    post = client.post(
        "/posts/",
        json={"title": "Hello", "content": "World", "category_ids": [category_id]},
        headers=alice_headers,
    )
    assert post.status_code == 201
    post_id = post.json()["id"]
    assert post.json()["author"] == "Alice Smith"
    assert post.json()["category_titles"] == ["Tech"]

    comment = client.post(
        "/comments/", json={"content": "Nice", "post_id": post_id}, headers=bob_headers
    )
    assert comment.status_code == 201
    comment_id = comment.json()["id"]

    reply = client.post(
        "/comments/",
        json={"content": "Thanks", "post_id": post_id, "parent_comment_id": comment_id},
        headers=alice_headers,
    )
    assert reply.status_code == 201

    # Reactions toggle: create, remove, create, switch
    like_url = f"/likes/post/{post_id}"
    assert client.post(like_url, json={"type": "like"}, headers=bob_headers).status_code == 201
    assert client.post(like_url, json={"type": "like"}, headers=bob_headers).status_code == 204
    assert client.post(like_url, json={"type": "like"}, headers=bob_headers).status_code == 201
    switched = client.post(like_url, json={"type": "dislike"}, headers=bob_headers)
    assert switched.status_code == 200
    assert switched.json()["type"] == "dislike"

    check = client.get(f"/likes/post/{post_id}/check", headers=bob_headers)
    assert check.json() == {"user_reaction": "dislike"}
    check = client.get(f"/likes/post/{post_id}/check", headers=alice_headers)
    assert check.json() == {"user_reaction": None}

    assert client.get(f"/likes/post/{post_id}/count").json() == {"likes": 0, "dislikes": 1}

    assert (
        client.post(
            f"/likes/comment/{comment_id}", json={"type": "like"}, headers=alice_headers
        ).status_code
        == 201
    )
    assert client.get(f"/likes/comment/{comment_id}/count").json() == {
        "likes": 1,
        "dislikes": 0,
    }

    roots = client.get(f"/comments/post/{post_id}").json()
    assert [c["id"] for c in roots] == [comment_id]
    assert roots[0]["reply_count"] == 1
    assert roots[0]["like_count"] == 1
    assert roots[0]["author"] == "Bob Jones"

    replies = client.get(f"/comments/{comment_id}/replies").json()
    assert [r["content"] for r in replies] == ["Thanks"]

    listing = client.get("/posts/", params={"page": 1, "limit": 10}).json()
    assert listing["total"] == 1
    listed = listing["posts"][0]
    assert (listed["likes_count"], listed["dislikes_count"], listed["comments_count"]) == (
        0,
        1,
        2,
    )

    # Bob cannot edit Alice's post, an admin can delete it
    assert (
        client.put(f"/posts/{post_id}", json={"title": "Hijacked"}, headers=bob_headers).status_code
        == 403
    )
    assert client.delete(f"/posts/{post_id}", headers=admin_headers).status_code == 204
    assert client.get(f"/posts/{post_id}").status_code == 404
    assert client.get(f"/comments/{comment_id}").status_code == 404


def test_reply_depth_limit_over_http(client, db, post, alice):
    headers = auth_headers(alice)
    parent_id = None
    for depth in range(4):
        body = {"content": f"level {depth}", "post_id": post.id}
        if parent_id:
            body["parent_comment_id"] = parent_id
        response = client.post("/comments/", json=body, headers=headers)
        assert response.status_code == 201
        parent_id = response.json()["id"]

    too_deep = client.post(
        "/comments/",
        json={"content": "level 4", "post_id": post.id, "parent_comment_id": parent_id},
        headers=headers,
    )
    assert too_deep.status_code == 400
    assert too_deep.json() == {
        "error": "Maximum reply depth exceeded (max 3)",
        "type": "validation_failed",
    }


def test_create_post_with_unknown_category(client, alice, tech):
    response = client.post(
        "/posts/",
        json={"title": "t", "content": "c", "category_ids": [tech.id, "nope"]},
        headers=auth_headers(alice),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Some categories not found"
    assert client.get("/posts/all").json() == []


def test_post_listing_query_validation(client, post):
    assert client.get("/posts/", params={"sort_order": "sideways"}).status_code == 422
    assert client.get("/posts/", params={"page": 0}).status_code == 422

    lower = client.get("/posts/", params={"sort_order": "asc", "sort_option": "likes"})
    assert lower.status_code == 200
    assert lower.json()["total"] == 1


def test_posts_by_user_endpoint(client, db, alice, bob, tech):
    post = make_post(db, alice, [tech], title="mine")
    make_post(db, bob, [tech], title="theirs")

    response = client.get("/posts/user", params={"user_id": alice.id})
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [post.id]

    missing = client.get("/posts/user", params={"user_id": "missing"})
    assert missing.status_code == 404
    assert missing.json() == {"error": "User not found", "type": "not_found"}


def test_comment_author_or_admin(client, db, post, alice, bob, admin):
    comment = make_comment(db, bob, post, content="original")
    url = f"/comments/{comment.id}"

    assert client.put(url, json={"content": "x"}, headers=auth_headers(alice)).status_code == 403

    edited = client.put(url, json={"content": "edited"}, headers=auth_headers(bob))
    assert edited.status_code == 200
    assert edited.json()["content"] == "edited"
    assert edited.json()["author"] == bob.id

    assert client.delete(url, headers=auth_headers(admin)).status_code == 204
    assert client.delete(url, headers=auth_headers(admin)).status_code == 404


def test_user_management(client, alice, bob, admin, tech, db):
    make_post(db, alice, [tech])

    assert client.get("/users/", headers=auth_headers(alice)).status_code == 403
    listing = client.get("/users/", headers=auth_headers(admin)).json()
    assert listing["total"] >= 3

    found = client.get(
        "/users/find-user-by-username", params={"username": "bob"}, headers=auth_headers(alice)
    )
    assert found.json()["id"] == bob.id
    assert (
        client.get(
            "/users/find-user-by-email",
            params={"email": "nobody@example.com"},
            headers=auth_headers(alice),
        ).status_code
        == 404
    )

    own = client.put(
        f"/users/{alice.id}", json={"full_name": "Alice S."}, headers=auth_headers(alice)
    )
    assert own.status_code == 200
    assert own.json()["full_name"] == "Alice S."

    assert (
        client.put(
            f"/users/{alice.id}", json={"role": "admin"}, headers=auth_headers(alice)
        ).status_code
        == 403
    )
    assert (
        client.put(
            f"/users/{bob.id}", json={"full_name": "Evil"}, headers=auth_headers(alice)
        ).status_code
        == 403
    )

    activity = client.get(f"/users/{alice.id}/activity", headers=auth_headers(alice)).json()
    assert len(activity["post_ids"]) == 1
    assert activity["comment_ids"] == []

    assert client.delete(f"/users/{bob.id}", headers=auth_headers(admin)).status_code == 204
    assert client.delete(f"/users/{bob.id}", headers=auth_headers(admin)).status_code == 404


def test_category_endpoints(client, admin, tech):
    headers = auth_headers(admin)

    assert client.get("/categories/title/Tech").json()["id"] == tech.id
    assert client.get("/categories/title/Nope").status_code == 404

    duplicate = client.post("/categories/", json={"title": "Tech"}, headers=headers)
    assert duplicate.status_code == 409

    renamed = client.put(f"/categories/{tech.id}", json={"title": "Technology"}, headers=headers)
    assert renamed.json()["title"] == "Technology"

    assert [c["title"] for c in client.get("/categories/").json()] == ["Technology"]
    assert client.delete(f"/categories/{tech.id}", headers=headers).status_code == 204
    assert client.get(f"/categories/{tech.id}").status_code == 404


def test_user_search_treats_wildcards_literally(client, db, admin):
    make_user(db, "ann_lee", full_name="Ann Lee")
    make_user(db, "annxlee", full_name="Ann X")
    headers = auth_headers(admin)

    found = client.get("/users/", params={"search": "ann_"}, headers=headers).json()
    assert [u["username"] for u in found["users"]] == ["ann_lee"]

    nothing = client.get("/users/", params={"search": "100%"}, headers=headers).json()
    assert nothing["total"] == 0


def test_rate_limited_response_shape(client):
    for _ in range(10):
        assert client.get("/health").status_code == 200

    limited = client.get("/health")
    assert limited.status_code == 429
    assert limited.json()["type"] == "rate_limited"
