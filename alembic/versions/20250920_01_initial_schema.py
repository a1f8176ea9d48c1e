"""
Initial VidTube schema.

- users (channel = user), videos, comments, tweets
- likes (exactly one target; unique per liker + target)
- subscriptions (unique per subscriber + channel; no self-subscription)
- playlists + playlist_videos (ordered entries)
- watch_history (one row per user + video)
"""

from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic.
revision = "20250920_01_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _user_fk(name: str, **kw) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), **kw)


def upgrade() -> None:
    # --- Accounts ---
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("fullname", sa.String(length=120), nullable=False),
        sa.Column("avatar", sa.String(length=1024), nullable=False),
        sa.Column("cover_image", sa.String(length=1024), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("refresh_token_hash", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("username = lower(username)", name="ck_users_username_lowercase"),
        sa.CheckConstraint("email = lower(email)", name="ck_users_email_lowercase"),
    )

    # --- Content ---
    op.create_table(
        "videos",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("video_file", sa.String(length=1024), nullable=False),
        sa.Column("thumbnail", sa.String(length=1024), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("duration", sa.Float(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        _user_fk("owner_id", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_videos"),
        sa.CheckConstraint("views >= 0", name="ck_videos_views_non_negative"),
        sa.CheckConstraint("duration >= 0", name="ck_videos_duration_non_negative"),
    )
    op.create_index("ix_videos_owner_id", "videos", ["owner_id"])
    op.create_index("ix_videos_published_created", "videos", ["is_published", "created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("video_id", sa.Uuid(), sa.ForeignKey("videos.id", ondelete="CASCADE"), nullable=False),
        _user_fk("owner_id", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_comments"),
    )
    op.create_index("ix_comments_video_id", "comments", ["video_id"])
    op.create_index("ix_comments_owner_id", "comments", ["owner_id"])

    op.create_table(
        "tweets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        _user_fk("owner_id", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_tweets"),
    )
    op.create_index("ix_tweets_owner_id", "tweets", ["owner_id"])

    # --- Engagement ---
    op.create_table(
        "likes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("video_id", sa.Uuid(), sa.ForeignKey("videos.id", ondelete="CASCADE"), nullable=True),
        sa.Column("comment_id", sa.Uuid(), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True),
        sa.Column("tweet_id", sa.Uuid(), sa.ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True),
        _user_fk("liked_by_id", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_likes"),
        sa.CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_likes_exactly_one_target",
        ),
        sa.UniqueConstraint("liked_by_id", "video_id", name="uq_likes_liked_by_video"),
        sa.UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_liked_by_comment"),
        sa.UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_liked_by_tweet"),
    )
    for col in ("video_id", "comment_id", "tweet_id", "liked_by_id"):
        op.create_index(f"ix_likes_{col}", "likes", [col])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("subscriber_id", nullable=False),
        _user_fk("channel_id", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_subscriptions"),
        sa.UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
        sa.CheckConstraint("subscriber_id <> channel_id", name="ck_subscriptions_not_self"),
    )
    op.create_index("ix_subscriptions_subscriber_id", "subscriptions", ["subscriber_id"])
    op.create_index("ix_subscriptions_channel_id", "subscriptions", ["channel_id"])

    # --- Playlists ---
    op.create_table(
        "playlists",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        _user_fk("owner_id", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_playlists"),
        sa.UniqueConstraint("owner_id", "name", name="uq_playlists_owner_name"),
    )
    op.create_index("ix_playlists_owner_id", "playlists", ["owner_id"])

    op.create_table(
        "playlist_videos",
        sa.Column("playlist_id", sa.Uuid(), sa.ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("video_id", sa.Uuid(), sa.ForeignKey("videos.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("playlist_id", "video_id", name="pk_playlist_videos"),
    )
    op.create_index("ix_playlist_videos_video_id", "playlist_videos", ["video_id"])

    # --- History ---
    op.create_table(
        "watch_history",
        _user_fk("user_id", nullable=False),
        sa.Column("video_id", sa.Uuid(), sa.ForeignKey("videos.id", ondelete="CASCADE"), nullable=False),
        sa.Column("watched_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "video_id", name="pk_watch_history"),
    )
    op.create_index("ix_watch_history_user_watched", "watch_history", ["user_id", "watched_at"])


def downgrade() -> None:
    op.drop_table("watch_history")
    op.drop_table("playlist_videos")
    op.drop_table("playlists")
    op.drop_table("subscriptions")
    op.drop_table("likes")
    op.drop_table("tweets")
    op.drop_table("comments")
    op.drop_table("videos")
    op.drop_table("users")
