"""
Post Service - community feed.

Posts embed their likes (uid -> True) and comments (comment id -> comment)
so a single document renders a feed card. Feed and comment listeners are
served through the listener hub, newest first.
"""

import logging
import uuid
from typing import Callable, List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection

from jobboard.core.exceptions import NotFoundError, PermissionDeniedError
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.services.documents import serialize_doc, serialize_docs, to_object_id, now, sort_newest_first
from jobboard.services.realtime import get_listener_hub

logger = logging.getLogger(__name__)

FEED_TOPIC = "posts"


def _comments_topic(post_id: str) -> str:
    return f"comments:{post_id}"


class PostService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["posts"])
        self.hub = get_listener_hub()

    def _get_or_404(self, post_id: str) -> dict:
        oid = to_object_id(post_id)
        doc = self.collection.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFoundError("Post not found")
        return doc

    def create_post(self, user_id: str, content: str, image_url: Optional[str] = None) -> dict:
        doc = {
            "author_id": user_id,
            "content": content,
            "image_url": image_url,
            "timestamp": now(),
            "likes": {},
            "comments": {},
            "shares": 0,
            "likes_count": 0,
            "comments_count": 0,
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        self.hub.publish(FEED_TOPIC)
        return serialize_doc(doc)

    def get_posts(self) -> List[dict]:
        cursor = self.collection.find({}, sort=[("timestamp", DESCENDING), ("_id", DESCENDING)])
        return serialize_docs(cursor)

    def get_post(self, post_id: str) -> dict:
        return serialize_doc(self._get_or_404(post_id))

    def get_user_posts(self, user_id: str) -> List[dict]:
        cursor = self.collection.find(
            {"author_id": user_id}, sort=[("timestamp", DESCENDING), ("_id", DESCENDING)]
        )
        return serialize_docs(cursor)

    def subscribe_to_posts(self, callback: Callable[[list], None]) -> Callable[[], None]:
        return self.hub.subscribe(FEED_TOPIC, self.get_posts, callback)

    def toggle_like(self, post_id: str, user_id: str) -> dict:
        doc = self._get_or_404(post_id)
        is_liked = bool((doc.get("likes") or {}).get(user_id))

        if is_liked:
            update = {"$unset": {f"likes.{user_id}": ""}}
            likes_count = max(0, (doc.get("likes_count") or 0) - 1)
        else:
            update = {"$set": {f"likes.{user_id}": True}}
            likes_count = (doc.get("likes_count") or 0) + 1
        update.setdefault("$set", {})["likes_count"] = likes_count

        self.collection.update_one({"_id": doc["_id"]}, update)
        self.hub.publish(FEED_TOPIC)
        return {"is_liked": not is_liked, "likes_count": likes_count}

    def share_post(self, post_id: str) -> int:
        doc = self._get_or_404(post_id)
        self.collection.update_one({"_id": doc["_id"]}, {"$inc": {"shares": 1}})
        self.hub.publish(FEED_TOPIC)
        return (doc.get("shares") or 0) + 1

    def delete_post(self, post_id: str, user_id: str) -> None:
        doc = self._get_or_404(post_id)
        if doc["author_id"] != user_id:
            raise PermissionDeniedError("Unauthorized to delete this post")
        self.collection.delete_one({"_id": doc["_id"]})
        logger.info("Post %s deleted by %s", post_id, user_id)
        self.hub.publish(FEED_TOPIC)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def get_comments(self, post_id: str) -> List[dict]:
        doc = self._get_or_404(post_id)
        return sort_newest_first(list((doc.get("comments") or {}).values()), "timestamp")

    def subscribe_to_comments(self, post_id: str, callback: Callable[[list], None]) -> Callable[[], None]:
        return self.hub.subscribe(_comments_topic(post_id), lambda: self.get_comments(post_id), callback)

    def add_comment(self, post_id: str, user_id: str, content: str) -> dict:
        doc = self._get_or_404(post_id)
        comment = {
            "id": uuid.uuid4().hex,
            "author_id": user_id,
            "content": content,
            "timestamp": now(),
            "likes": {},
            "likes_count": 0,
        }
        comments_count = (doc.get("comments_count") or 0) + 1
        self.collection.update_one(
            {"_id": doc["_id"]},
            {"$set": {f"comments.{comment['id']}": comment, "comments_count": comments_count}}
        )
        self._publish_comments(post_id)
        return {"comment": comment, "comments_count": comments_count}

    def _get_comment_or_404(self, doc: dict, comment_id: str) -> dict:
        comment = (doc.get("comments") or {}).get(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        return comment

    def delete_comment(self, post_id: str, comment_id: str, user_id: str) -> int:
        doc = self._get_or_404(post_id)
        comment = self._get_comment_or_404(doc, comment_id)
        if comment["author_id"] != user_id:
            raise PermissionDeniedError("Unauthorized to delete this comment")

        comments_count = max(0, (doc.get("comments_count") or 0) - 1)
        self.collection.update_one(
            {"_id": doc["_id"]},
            {"$unset": {f"comments.{comment_id}": ""}, "$set": {"comments_count": comments_count}}
        )
        self._publish_comments(post_id)
        return comments_count

    def toggle_comment_like(self, post_id: str, comment_id: str, user_id: str) -> dict:
        doc = self._get_or_404(post_id)
        comment = self._get_comment_or_404(doc, comment_id)
        is_liked = bool((comment.get("likes") or {}).get(user_id))
        prefix = f"comments.{comment_id}"

        if is_liked:
            update = {"$unset": {f"{prefix}.likes.{user_id}": ""}}
            likes_count = max(0, (comment.get("likes_count") or 0) - 1)
        else:
            update = {"$set": {f"{prefix}.likes.{user_id}": True}}
            likes_count = (comment.get("likes_count") or 0) + 1
        update.setdefault("$set", {})[f"{prefix}.likes_count"] = likes_count

        self.collection.update_one({"_id": doc["_id"]}, update)
        self._publish_comments(post_id)
        return {"is_liked": not is_liked, "likes_count": likes_count}

    def _publish_comments(self, post_id: str) -> None:
        self.hub.publish(_comments_topic(post_id))
        self.hub.publish(FEED_TOPIC)


def get_post_service() -> PostService:
    return PostService()
