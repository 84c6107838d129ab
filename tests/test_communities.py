"""Integration tests for community creation, membership and search."""
from __future__ import annotations

import os
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_threadline.db")
os.environ.setdefault("IDENTITY_JWT_SECRET", "test-identity-secret")
os.environ.setdefault("IDENTITY_WEBHOOK_SECRET", "test-webhook-secret")

from threadline.database import Base, SessionLocal, engine  # noqa: E402
from threadline.main import app  # noqa: E402
from threadline.models import Community, Thread, User, community_members, saved_threads, thread_likes  # noqa: E402
from threadline.services import get_current_identity, get_current_user, get_optional_user  # noqa: E402


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
def user_factory() -> Callable[[str], User]:
    def _factory(username: str) -> User:
        with SessionLocal() as session:
            user = User(external_id=f"user_{username}", username=username, name=username.title(), onboarded=True)
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _factory


@pytest.fixture
def authed_client() -> Iterator[Callable[[User], TestClient]]:
    with TestClient(app) as client:
        def _with_user(user: User) -> TestClient:
            app.dependency_overrides[get_current_user] = lambda: user
            app.dependency_overrides[get_optional_user] = lambda: user
            app.dependency_overrides[get_current_identity] = lambda: user.external_id
            return client
        yield _with_user
    app.dependency_overrides.clear()


def _create(client: TestClient, external_id: str, name: str, username: str) -> dict:
    response = client.post(
        "/communities/",
        json={"external_id": external_id, "name": name, "username": username, "bio": "about"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_creator_becomes_first_member(authed_client, user_factory):
    owner = user_factory("owner")
    client = authed_client(owner)

    body = _create(client, "org_gardens", "Gardeners", "gardens")
    assert body["created_by"]["username"] == "owner"
    assert [member["username"] for member in body["members"]] == ["owner"]
    assert body["thread_count"] == 0


def test_duplicate_community_is_conflict(authed_client, user_factory):
    client = authed_client(user_factory("owner"))
    _create(client, "org_gardens", "Gardeners", "gardens")
    response = client.post("/communities/", json={"external_id": "org_gardens", "name": "Again", "username": "again"})
    assert response.status_code == 409


def test_membership_is_idempotent(authed_client, user_factory):
    owner = user_factory("owner")
    joiner = user_factory("joiner")
    client = authed_client(owner)
    _create(client, "org_gardens", "Gardeners", "gardens")

    joined = client.post(f"/communities/org_gardens/members/{joiner.external_id}").json()
    assert joined["status"] == "joined"
    assert joined["member_count"] == 2

    again = client.post(f"/communities/org_gardens/members/{joiner.external_id}").json()
    assert again["status"] == "noop"
    assert again["member_count"] == 2

    left = client.delete(f"/communities/org_gardens/members/{joiner.external_id}").json()
    assert left["status"] == "left"
    assert left["member_count"] == 1


def test_threads_posted_into_community(authed_client, user_factory):
    owner = user_factory("owner")
    client = authed_client(owner)
    _create(client, "org_gardens", "Gardeners", "gardens")

    created = client.post("/threads/", json={"text": "tomatoes are up", "community_id": "org_gardens"})
    assert created.status_code == 201, created.text
    assert created.json()["community"]["name"] == "Gardeners"

    listing = client.get("/communities/org_gardens/threads").json()
    assert [item["text"] for item in listing["threads"]] == ["tomatoes are up"]

    detail = client.get("/communities/org_gardens").json()
    assert detail["thread_count"] == 1

    profile = client.get("/users/me").json()
    assert [community["username"] for community in profile["communities"]] == ["gardens"]


def test_search_communities_paginates(authed_client, user_factory):
    client = authed_client(user_factory("owner"))
    _create(client, "org_a", "Garden Club", "garden-club")
    _create(client, "org_b", "Book Club", "book-club")
    _create(client, "org_c", "Chess", "chess")

    body = client.get("/communities/", params={"q": "club", "page_size": 1}).json()
    assert body["total"] == 2
    assert len(body["communities"]) == 1
    assert body["is_next"] is True

    empty = client.get("/communities/", params={"q": "rowing"}).json()
    assert empty["communities"] == []
    assert empty["is_next"] is False


def test_update_community_info(authed_client, user_factory):
    client = authed_client(user_factory("owner"))
    _create(client, "org_gardens", "Gardeners", "gardens")

    body = client.patch("/communities/org_gardens", json={"name": "Urban Gardeners", "image": "https://img.test/g.png"}).json()
    assert body["name"] == "Urban Gardeners"
    assert body["image"] == "https://img.test/g.png"
    assert body["username"] == "gardens"
