"""
Global search across users, creators and posts.

Candidates come from the database with case-insensitive substring filters,
then every candidate is scored in Python (see scoring.py) and the list is
re-sorted by score.
"""
import logging
from dataclasses import asdict
from functools import reduce
from operator import or_
from typing import Dict, List, Sequence

from django.contrib.auth import get_user_model
from django.db.models import Q, TextField
from django.db.models.functions import Cast

from apps.creators.services import active_creators, get_creators_by_ids
from apps.identity.services import get_user_summaries
from apps.social.models import Post, PostStatus
from .dtos import CreatorHitDTO, PostCreatorDTO, PostHitDTO, UserHitDTO
from .scoring import calculate_relevance_score, keyword_match, round_half_up

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 3
MAX_LIMIT = 10
TOP_RESULTS = 5

USER_THRESHOLD = 30
CREATOR_THRESHOLD = 25
POST_THRESHOLD = 20

CREATOR_KEYWORD_BONUS = 15
CREATOR_VERIFIED_BONUS = 5
CREATOR_RATING_BONUS = 3
CREATOR_LIVE_BONUS = 2
POST_TAG_BONUS = 20
POST_ENGAGEMENT_CAP = 10
POST_VERIFIED_CREATOR_BONUS = 3

CREATOR_TAG_PREVIEW = 5
POST_TAG_PREVIEW = 3
PREVIEW_CHARS = 100


def smart_condition(query: str, fields: Sequence[str]) -> Q:
    """OR of `field icontains query` and `field icontains term` for every term."""
    terms = [query] + query.lower().split()
    return reduce(or_, (Q(**{f"{field}__icontains": term}) for term in terms for field in fields))


def _by_score(hits: list, limit: int) -> list:
    return sorted(hits, key=lambda h: h.score, reverse=True)[:limit]


# =============================================================================
# Entity searches
# =============================================================================

def search_users(query: str, limit: int = DEFAULT_LIMIT) -> List[UserHitDTO]:
    users = (
        get_user_model().objects
        .filter(is_active=True)
        .filter(smart_condition(query, ['username', 'first_name', 'last_name', 'email']))
        .order_by('-created_at')[:limit * 2]
    )
    hits = []
    for user in users:
        score = calculate_relevance_score(
            {'username': user.username, 'first_name': user.first_name, 'last_name': user.last_name},
            query, ['username', 'first_name', 'last_name'],
        )
        if score <= USER_THRESHOLD:
            continue
        hits.append(UserHitDTO(
            id=user.id,
            username=user.username,
            display_name=f"{user.first_name} {user.last_name}".strip() or user.username,
            avatar=user.avatar,
            is_online=user.is_online,
            score=score,
        ))
    return _by_score(hits, limit)


def search_creators(query: str, limit: int = DEFAULT_LIMIT) -> List[CreatorHitDTO]:
    fields = ['stage_name', 'title_bio', 'bio', 'service']
    query_lower = query.lower()
    candidates = list(
        active_creators()
        .annotate(
            tags_text=Cast('tags', output_field=TextField()),
            specialties_text=Cast('specialties', output_field=TextField()),
        )
        .filter(
            smart_condition(query, fields)
            | Q(tags_text__icontains=query)
            | Q(specialties_text__icontains=query)
        )
        .order_by('-rating', '-total_ratings')[:limit * 2]
    )
    owners = get_user_summaries(c.user_id for c in candidates)

    hits = []
    for creator in candidates:
        values = {f: getattr(creator, f) for f in fields}
        keywords = list(creator.tags or []) + list(creator.specialties or [])
        basic_match = any(query_lower in (values[f] or '').lower() for f in fields)
        keyword_hit = keyword_match(keywords, query)
        if not (basic_match or keyword_hit):
            continue

        score = calculate_relevance_score(values, query, fields)
        if keyword_hit:
            score += CREATOR_KEYWORD_BONUS
        if creator.is_verified:
            score += CREATOR_VERIFIED_BONUS
        if creator.rating >= 4:
            score += CREATOR_RATING_BONUS
        if creator.is_live:
            score += CREATOR_LIVE_BONUS
        if score <= CREATOR_THRESHOLD:
            continue

        hits.append(CreatorHitDTO(
            id=creator.id,
            stage_name=creator.stage_name,
            display_name=creator.stage_name,
            bio=creator.title_bio or creator.bio[:PREVIEW_CHARS],
            bio_thumbnail=creator.bio_thumbnail,
            rating=creator.rating,
            total_ratings=creator.total_ratings,
            is_verified=creator.is_verified,
            is_live=creator.is_live,
            tags=list(creator.tags or [])[:CREATOR_TAG_PREVIEW],
            user=owners.get(creator.user_id),
            score=score,
        ))
    return _by_score(hits, limit)


def _engagement(post: Post) -> float:
    raw = (post.like_count * 2 + post.comment_count * 3 + post.view_count * 0.1) / 100
    return min(raw, POST_ENGAGEMENT_CAP)


def _preview(content: str) -> str:
    content = content or ''
    if len(content) > PREVIEW_CHARS:
        return content[:PREVIEW_CHARS] + '...'
    return content


def search_posts(query: str, limit: int = DEFAULT_LIMIT) -> List[PostHitDTO]:
    fields = ['content', 'location']
    active_users = get_user_model().objects.filter(is_active=True).values('id')
    candidates = list(
        Post.objects
        .filter(status=PostStatus.PUBLISHED, is_public=True, user_id__in=active_users)
        .annotate(tags_text=Cast('tags', output_field=TextField()))
        .filter(smart_condition(query, fields) | Q(tags_text__icontains=query))
        .order_by('-like_count', '-view_count', '-created_at')[:limit * 2]
    )
    authors = get_user_summaries(p.user_id for p in candidates)
    creators = get_creators_by_ids(p.creator_id for p in candidates)

    hits = []
    for post in candidates:
        score = calculate_relevance_score(
            {'content': post.content, 'location': post.location}, query, fields
        )
        if keyword_match(post.tags or [], query):
            score += POST_TAG_BONUS
        score += _engagement(post)
        creator = creators.get(post.creator_id)
        if creator and creator.is_verified:
            score += POST_VERIFIED_CREATOR_BONUS
        if score <= POST_THRESHOLD:
            continue

        hits.append(PostHitDTO(
            id=post.id,
            display_name=_preview(post.content),
            media_type=post.media_type,
            thumbnail_url=post.thumbnail_url,
            like_count=post.like_count,
            comment_count=post.comment_count,
            view_count=post.view_count,
            tags=list(post.tags or [])[:POST_TAG_PREVIEW],
            user=authors.get(post.user_id),
            creator=PostCreatorDTO(
                id=creator.id, stage_name=creator.stage_name, is_verified=creator.is_verified,
            ) if creator else None,
            created_at=post.created_at,
            score=score,
        ))
    return _by_score(hits, limit)


# =============================================================================
# Combined search
# =============================================================================

def _safe(kind: str, search, query: str, limit: int) -> list:
    """Run one entity search; any failure is logged and yields no hits for that type."""
    try:
        return search(query, limit)
    except Exception:
        logger.exception(f"Search for {kind} failed for query {query!r}")
        return []


def parse_limit(limit) -> int:
    """Per-type result count: default 3, at most 10."""
    try:
        value = int(limit)
    except (TypeError, ValueError):
        value = 0
    return min(value if value >= 1 else DEFAULT_LIMIT, MAX_LIMIT)


def search_all(query, limit=DEFAULT_LIMIT) -> Dict:
    """
    Search users, creators and posts and build the response payload.

    Raises:
        ValueError: if the trimmed query is shorter than 2 characters.
    """
    query = (query or '').strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise ValueError("Query must be at least 2 characters long")
    limit = parse_limit(limit)

    users = _safe('users', search_users, query, limit)
    creators = _safe('creators', search_creators, query, limit)
    posts = _safe('posts', search_posts, query, limit)

    ranked = sorted(users + creators + posts, key=lambda h: h.score, reverse=True)
    best = ranked[0] if ranked else None
    total = len(users) + len(creators) + len(posts)
    logger.debug(f"Search {query!r}: {len(users)} users, {len(creators)} creators, {len(posts)} posts")

    return {
        "query": query,
        "total_results": total,
        "results": {
            "users": [_scored(h) for h in users],
            "creators": [_scored(h) for h in creators],
            "posts": [_scored(h) for h in posts],
        },
        "top_results": [
            {"id": h.id, "type": h.type, "display_name": h.display_name,
             "relevance_score": round_half_up(h.score)}
            for h in ranked[:TOP_RESULTS]
        ],
        "suggestions": {
            "has_users": bool(users),
            "has_creators": bool(creators),
            "has_posts": bool(posts),
            "best_match": {
                "type": best.type,
                "display_name": best.display_name,
                "score": round_half_up(best.score),
            } if best else None,
        },
    }


def _scored(hit) -> dict:
    data = asdict(hit)
    if hit.type == 'post':
        data['content'] = hit.display_name
    data['relevance_score'] = round_half_up(data.pop('score'))
    return data
