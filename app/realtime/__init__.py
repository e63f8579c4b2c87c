from app.realtime.feed import CommentFeed, Subscription, SubscriptionClosed, get_feed

__all__ = ["CommentFeed", "Subscription", "SubscriptionClosed", "get_feed"]
