"""Tests for user search, activity, replies and saved listings."""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator

import pytest
from fastapi import HTTPException
from sqlalchemy import delete
from sqlalchemy.exc import OperationalError

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_threadline.db")
os.environ.setdefault("IDENTITY_JWT_SECRET", "test-identity-secret")
os.environ.setdefault("IDENTITY_WEBHOOK_SECRET", "test-webhook-secret")

from threadline.database import Base, SessionLocal, engine  # noqa: E402
from threadline.models import Community, Thread, User, community_members, saved_threads, thread_likes  # noqa: E402
from threadline.services import (  # noqa: E402
    DataAccessError,
    add_reply,
    create_thread,
    fetch_suggested_users,
    fetch_user,
    fetch_user_posts,
    fetch_user_replies,
    fetch_user_saved,
    fetch_users,
    get_activity,
    set_like_state,
    set_saved_state,
    update_user,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(thread_likes))
        session.execute(delete(saved_threads))
        session.execute(delete(community_members))
        session.execute(delete(Thread))
        session.execute(delete(Community))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def user_factory() -> Callable[..., User]:
    counter = {"value": 0}

    def _factory(username: str, name: str | None = None) -> User:
        counter["value"] += 1
        with SessionLocal() as session:
            user = User(
                external_id=f"user_{username}",
                username=username,
                name=name or username.title(),
                onboarded=True,
                created_at=BASE_TIME + timedelta(minutes=counter["value"]),
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _factory


def test_search_never_returns_requester(user_factory):
    me = user_factory("annie", "Annie Hall")
    user_factory("anna", "Anna Karenina")
    user_factory("bob", "Bob Ross")

    with SessionLocal() as session:
        page = fetch_users(session, requester_external_id=me.external_id, search="ann")
        usernames = [user.username for user in page.items]

    assert usernames == ["anna"]
    assert me.username not in usernames
    assert page.is_next is False


def test_search_is_case_insensitive_over_username_and_name(user_factory):
    me = user_factory("viewer")
    user_factory("zed", "Marie CURIE")
    user_factory("curious_george", "George")
    user_factory("other", "Someone")

    with SessionLocal() as session:
        page = fetch_users(session, requester_external_id=me.external_id, search="cUrI")

    assert {user.username for user in page.items} == {"zed", "curious_george"}


def test_blank_search_returns_everyone_but_requester(user_factory):
    me = user_factory("viewer")
    for index in range(3):
        user_factory(f"member{index}")

    with SessionLocal() as session:
        page = fetch_users(session, requester_external_id=me.external_id, search="   ")

    assert page.total == 3
    assert [user.username for user in page.items] == ["member2", "member1", "member0"]


def test_search_sort_order_ascending(user_factory):
    me = user_factory("viewer")
    for index in range(3):
        user_factory(f"member{index}")

    with SessionLocal() as session:
        page = fetch_users(session, requester_external_id=me.external_id, sort="asc")

    assert [user.username for user in page.items] == ["member0", "member1", "member2"]


def test_search_pagination_reports_next_page(user_factory):
    me = user_factory("viewer")
    for index in range(5):
        user_factory(f"member{index}")

    with SessionLocal() as session:
        first = fetch_users(session, requester_external_id=me.external_id, page_number=1, page_size=2)
        last = fetch_users(session, requester_external_id=me.external_id, page_number=3, page_size=2)

    assert len(first.items) == 2
    assert first.total == 5
    assert first.is_next is True
    assert len(last.items) == 1
    assert last.is_next is False


def test_search_with_zero_matches(user_factory):
    me = user_factory("viewer")
    user_factory("someone")

    with SessionLocal() as session:
        page = fetch_users(session, requester_external_id=me.external_id, search="nobody-here")

    assert page.items == []
    assert page.is_next is False


def test_search_treats_wildcards_literally(user_factory):
    me = user_factory("viewer")
    user_factory("under_score")
    user_factory("underscore")

    with SessionLocal() as session:
        page = fetch_users(session, requester_external_id=me.external_id, search="r_s")

    assert [user.username for user in page.items] == ["under_score"]


def test_activity_excludes_self_authored_replies(user_factory):
    author = user_factory("author")
    friend = user_factory("friend")
    stranger = user_factory("stranger")

    with SessionLocal() as session:
        post = create_thread(session, author=author, text="first post")
        self_reply = add_reply(session, thread_id=post.id, author=author, text="replying to myself")
        friend_reply = add_reply(session, thread_id=post.id, author=friend, text="nice one")
        other_post = create_thread(session, author=stranger, text="not yours")
        add_reply(session, thread_id=other_post.id, author=friend, text="elsewhere")

    with SessionLocal() as session:
        replies = get_activity(session, author.id)
        ids = [reply.id for reply in replies]
        names = [reply.author.name for reply in replies]

    assert ids == [friend_reply.id]
    assert self_reply.id not in ids
    assert names == ["Friend"]


def test_activity_is_empty_without_threads(user_factory):
    loner = user_factory("loner")
    with SessionLocal() as session:
        assert get_activity(session, loner.id) == []


def test_fetch_user_replies_lists_only_replies(user_factory):
    author = user_factory("author")
    friend = user_factory("friend")

    with SessionLocal() as session:
        post = create_thread(session, author=author, text="root")
        reply = add_reply(session, thread_id=post.id, author=friend, text="reply")

    with SessionLocal() as session:
        replies = fetch_user_replies(session, friend.external_id)
        assert [item.id for item in replies] == [reply.id]
        assert replies[0].author.username == "friend"
        assert fetch_user_replies(session, author.external_id) == []


def test_fetch_user_posts_returns_top_level_threads_with_reply_authors(user_factory):
    author = user_factory("author")
    friend = user_factory("friend")

    with SessionLocal() as session:
        post = create_thread(session, author=author, text="root")
        add_reply(session, thread_id=post.id, author=friend, text="reply")

    with SessionLocal() as session:
        owner, threads = fetch_user_posts(session, author.external_id)
        assert owner.id == author.id
        assert [thread.id for thread in threads] == [post.id]
        assert [child.author.username for child in threads[0].children] == ["friend"]


def test_fetch_user_saved_resolves_saved_list(user_factory):
    author = user_factory("author")
    reader = user_factory("reader")

    with SessionLocal() as session:
        kept = create_thread(session, author=author, text="keep me")
        create_thread(session, author=author, text="skip me")
        set_saved_state(session, thread_id=kept.id, user_id=reader.id, should_save=True)
        set_saved_state(session, thread_id=kept.id, user_id=reader.id, should_save=True)

    with SessionLocal() as session:
        saved = fetch_user_saved(session, reader.external_id)
        assert [thread.id for thread in saved] == [kept.id]
        assert saved[0].author.username == "author"

        profile = fetch_user(session, reader.external_id)
        assert [thread.id for thread in profile.saved] == [kept.id]


def test_update_user_upserts_and_lowercases_username():
    with SessionLocal() as session:
        created = update_user(session, external_id="user_new", username="MixedCase", name="New Person", bio="hi")
        assert created.username == "mixedcase"
        assert created.onboarded is True

        updated = update_user(session, external_id="user_new", username="renamed", name="Renamed", bio=None)
        assert updated.id == created.id
        assert updated.username == "renamed"


def test_update_user_rejects_taken_username(user_factory):
    user_factory("taken")
    with SessionLocal() as session:
        with pytest.raises(HTTPException) as exc:
            update_user(session, external_id="user_someone_else", username="Taken", name="Copycat")
    assert exc.value.status_code == 409


def test_fetch_user_missing_raises_not_found():
    with SessionLocal() as session:
        with pytest.raises(HTTPException) as exc:
            fetch_user(session, "user_ghost")
    assert exc.value.status_code == 404


def test_suggested_users_exclude_requester(user_factory):
    me = user_factory("viewer")
    for index in range(6):
        user_factory(f"member{index}")

    with SessionLocal() as session:
        users = fetch_suggested_users(session, requester_external_id=me.external_id, limit=4)

    assert len(users) == 4
    assert all(user.id != me.id for user in users)


def _failing(*args, **kwargs):
    raise OperationalError("SELECT users.id FROM users", {}, Exception("connection reset"))


def test_update_user_lookup_failure_is_wrapped(monkeypatch):
    with SessionLocal() as session:
        monkeypatch.setattr(session, "scalar", _failing)
        with pytest.raises(DataAccessError) as exc:
            update_user(session, external_id="user_new", username="fresh", name="Fresh")
    assert str(exc.value).startswith("Failed to look up user:")


def test_like_lookup_failure_is_wrapped(user_factory, monkeypatch):
    author = user_factory("author")
    with SessionLocal() as session:
        thread = create_thread(session, author=author, text="hello")
        monkeypatch.setattr(session, "scalar", _failing)
        with pytest.raises(DataAccessError) as exc:
            set_like_state(session, thread_id=thread.id, user_id=author.id, should_like=True)
    assert str(exc.value).startswith("Failed to update like:")
