"""Read models assembled with `ViewPlan`."""

from app.services.views.builder import (  # noqa: F401
    channel_profile,
    channel_subscribers,
    dashboard_stats,
    dashboard_videos,
    liked_videos,
    playlist_detail,
    subscribed_channels,
    user_playlists,
    user_tweets,
    video_comments,
    video_detail,
    video_feed,
    watch_history,
)
from app.services.views.plan import ViewPlan, owner_fields, page_meta, video_fields  # noqa: F401
