"""Community routes."""
from __future__ import annotations

from typing import cast
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_session
from ..models import Community, User
from ..schemas import (
    CommunityCreate,
    CommunityDetailResponse,
    CommunityResponse,
    CommunitySearchResponse,
    CommunityUpdate,
    MembershipResponse,
    SortOrder,
    ThreadListResponse,
    ThreadResponse,
)
from ..services import (
    add_member,
    count_community_threads,
    create_community,
    fetch_communities,
    fetch_community_details,
    fetch_community_threads,
    get_current_user,
    remove_member,
    saved_thread_ids,
    serialize_thread,
    update_community_info,
)

router = APIRouter(prefix="/communities", tags=["communities"])


def _detail(db: Session, community: Community) -> CommunityDetailResponse:
    response = CommunityDetailResponse.model_validate(community)
    response.thread_count = count_community_threads(db, community)
    return response


def _membership(community: Community, user: User, changed: bool, verb: str) -> MembershipResponse:
    return MembershipResponse(
        community_id=community.id,
        user_id=user.id,
        member_count=len(community.members),
        status=verb if changed else "noop",
    )


@router.post("/", response_model=CommunityDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_community_endpoint(
    payload: CommunityCreate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommunityDetailResponse:
    community = create_community(
        db,
        external_id=payload.external_id,
        name=payload.name,
        username=payload.username,
        image=payload.image,
        bio=payload.bio,
        created_by_external_id=current_user.external_id,
    )
    return _detail(db, fetch_community_details(db, community.external_id))


@router.get("/", response_model=CommunitySearchResponse)
async def search_communities_endpoint(
    q: str = Query(default="", max_length=150),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=100),
    sort: SortOrder = Query(default="desc"),
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommunitySearchResponse:
    result = fetch_communities(
        db,
        search=q,
        page_number=page,
        page_size=page_size or get_settings().default_page_size,
        sort=sort,
    )
    return CommunitySearchResponse(
        communities=[CommunityResponse.model_validate(item) for item in result.items],
        is_next=result.is_next,
        total=result.total,
        page_number=result.page_number,
        page_size=result.page_size,
    )


@router.get("/{external_id}", response_model=CommunityDetailResponse)
async def community_detail_endpoint(
    external_id: str,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommunityDetailResponse:
    return _detail(db, fetch_community_details(db, external_id))


@router.get("/{external_id}/threads", response_model=ThreadListResponse)
async def community_threads_endpoint(
    external_id: str,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ThreadListResponse:
    viewer_id = cast(UUID, current_user.id)
    saved = saved_thread_ids(db, viewer_id)
    threads = fetch_community_threads(db, external_id)
    return ThreadListResponse(
        threads=[ThreadResponse(**serialize_thread(thread, viewer_id=viewer_id, saved_ids=saved)) for thread in threads]
    )


@router.patch("/{external_id}", response_model=CommunityDetailResponse)
async def update_community_endpoint(
    external_id: str,
    payload: CommunityUpdate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommunityDetailResponse:
    update_community_info(db, external_id=external_id, name=payload.name, username=payload.username, image=payload.image)
    return _detail(db, fetch_community_details(db, external_id))


@router.post("/{external_id}/members/{user_external_id}", response_model=MembershipResponse)
async def add_member_endpoint(
    external_id: str,
    user_external_id: str,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> MembershipResponse:
    community, user, changed = add_member(db, community_external_id=external_id, user_external_id=user_external_id)
    return _membership(community, user, changed, "joined")


@router.delete("/{external_id}/members/{user_external_id}", response_model=MembershipResponse)
async def remove_member_endpoint(
    external_id: str,
    user_external_id: str,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> MembershipResponse:
    community, user, changed = remove_member(db, community_external_id=external_id, user_external_id=user_external_id)
    return _membership(community, user, changed, "left")
