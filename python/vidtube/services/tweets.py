"""Tweet services."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from vidtube.auth.permissions import require_owner
from vidtube.db.models import Like, LikeTargetKind, Tweet, User
from vidtube.db.session import transaction
from vidtube.errors import ApiErrorCode, NotFoundError, ValidationError
from vidtube.ids import parse_object_id
from vidtube.schemas.common import PageOut
from vidtube.schemas.tweets import TweetOut
from vidtube.services.pagination import PageRequest, SortSpec, paginate, require_non_empty


def _require_content(content: str | None) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError(message="Content is required")
    return content


def get_tweet_or_404(db: Session, tweet_id: str) -> Tweet:
    tweet_id = parse_object_id(tweet_id, "Invalid tweet id")
    tweet = db.get(Tweet, tweet_id)
    if tweet is None:
        raise NotFoundError(ApiErrorCode.E_TWEET_NOT_FOUND, "Tweet not found")
    return tweet


def create_tweet(db: Session, viewer_id: str, content: str | None) -> TweetOut:
    tweet = Tweet(owner_id=viewer_id, content=_require_content(content))
    with transaction(db):
        db.add(tweet)
    return TweetOut.model_validate(tweet)


def list_user_tweets(db: Session, user_id: str, page_request: PageRequest) -> PageOut[TweetOut]:
    """A user's tweets, newest first.

    Raises:
        NotFoundError: If the user does not exist or has no tweets.
    """
    user_id = parse_object_id(user_id, "Invalid user id")
    if db.get(User, user_id) is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")

    stmt = select(Tweet).where(Tweet.owner_id == user_id)
    page = require_non_empty(
        paginate(db, stmt, page_request, SortSpec(Tweet.created_at, descending=True), Tweet.id),
        "No tweets found for this user",
    )
    return PageOut.from_page(page, TweetOut.model_validate)


def update_tweet(db: Session, viewer_id: str, tweet_id: str, content: str | None) -> TweetOut:
    tweet = get_tweet_or_404(db, tweet_id)
    require_owner(viewer_id, tweet.owner_id, message="You can only edit your own tweets")
    content = _require_content(content)

    with transaction(db):
        tweet.content = content
    return TweetOut.model_validate(tweet)


def delete_tweet(db: Session, viewer_id: str, tweet_id: str) -> None:
    tweet = get_tweet_or_404(db, tweet_id)
    require_owner(viewer_id, tweet.owner_id, message="You can only delete your own tweets")

    with transaction(db):
        db.execute(
            delete(Like).where(Like.target_kind == LikeTargetKind.tweet, Like.target_id == tweet.id)
        )
        db.execute(delete(Tweet).where(Tweet.id == tweet.id))
