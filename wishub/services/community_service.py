import logging
from typing import Any, Dict, List, Union

from wishub.errors import NotFoundError
from wishub.schema import Comment, NewMessage, Post, coerce
from wishub.services.base import CollectionService

logger = logging.getLogger(__name__)

POSTS_KEY = "wis-community-posts"


class CommunityService(CollectionService[Post]):
    """Posts with their comments embedded; the whole thread list is one value."""

    key = POSTS_KEY
    model = Post

    def list(self) -> List[Post]:
        return self._load()

    def create(self, payload: Union[Dict[str, Any], NewMessage]) -> Post:
        data = coerce(NewMessage, payload)
        post = Post(name=data.name, message=data.message, attachments=data.attachments or [])

        posts = self._load()
        posts.append(post)
        self._save(posts)
        logger.info(f"Post created: {post.id} by {post.name}")
        return post

    def add_comment(self, post_id: str, payload: Union[Dict[str, Any], NewMessage]) -> Comment:
        data = coerce(NewMessage, payload)

        posts = self._load()
        for post in posts:
            if post.id == post_id:
                comment = Comment(name=data.name, message=data.message, attachments=data.attachments or [])
                post.comments.append(comment)
                self._save(posts)
                logger.info(f"Comment {comment.id} added to post {post_id}")
                return comment
        raise NotFoundError("Post not found")

    def delete_comment(self, post_id: str, comment_id: str) -> None:
        posts = self._load()
        for post in posts:
            if post.id == post_id:
                remaining = [comment for comment in post.comments if comment.id != comment_id]
                if len(remaining) == len(post.comments):
                    raise NotFoundError("Comment not found")
                post.comments = remaining
                self._save(posts)
                logger.info(f"Comment {comment_id} deleted from post {post_id}")
                return
        raise NotFoundError("Post not found")

    def delete(self, post_id: str) -> None:
        """Remove a post; its comments go with it."""
        posts = self._load()
        remaining = [post for post in posts if post.id != post_id]
        if len(remaining) == len(posts):
            raise NotFoundError("Post not found")
        self._save(remaining)
        logger.info(f"Post deleted: {post_id}")
