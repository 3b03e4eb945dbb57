"""
Post Routes (community feed)

POST   /posts                                  - Create post
GET    /posts                                  - Feed, newest first
GET    /posts/user/{user_id}                   - Posts by one author
POST   /posts/{post_id}/like                   - Like / unlike
POST   /posts/{post_id}/share                  - Count a share
DELETE /posts/{post_id}                        - Delete (author only)
GET    /posts/{post_id}/comments               - Comments, newest first
POST   /posts/{post_id}/comments               - Add comment
DELETE /posts/{post_id}/comments/{comment_id}  - Delete comment (author only)
POST   /posts/{post_id}/comments/{comment_id}/like - Like / unlike comment

WS     /posts/ws/feed?token=...                - Live feed
WS     /posts/ws/{post_id}/comments?token=...  - Live comments for one post
"""

from fastapi import APIRouter, Depends, WebSocket
from typing import List

from jobboard.api.websocket import authenticate_websocket, reject_websocket, stream_snapshots
from jobboard.core.auth import get_current_user
from jobboard.core.exceptions import AppError
from jobboard.services.post_service import get_post_service
from jobboard.schemas.schemas import (
    PostCreate, PostResponse, CommentCreate, CommentResponse, LikeResponse, MessageResponse
)

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(request: PostCreate, user: dict = Depends(get_current_user)):
    return get_post_service().create_post(user["user_id"], request.content, request.image_url)


@router.get("", response_model=List[PostResponse])
async def feed(user: dict = Depends(get_current_user)):
    return get_post_service().get_posts()


@router.get("/user/{user_id}", response_model=List[PostResponse])
async def user_posts(user_id: str, user: dict = Depends(get_current_user)):
    return get_post_service().get_user_posts(user_id)


@router.post("/{post_id}/like", response_model=LikeResponse)
async def toggle_like(post_id: str, user: dict = Depends(get_current_user)):
    return LikeResponse(**get_post_service().toggle_like(post_id, user["user_id"]))


@router.post("/{post_id}/share")
async def share_post(post_id: str, user: dict = Depends(get_current_user)):
    return {"success": True, "shares": get_post_service().share_post(post_id)}


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, user: dict = Depends(get_current_user)):
    get_post_service().delete_post(post_id, user["user_id"])
    return MessageResponse(message="Post deleted")


@router.get("/{post_id}/comments", response_model=List[CommentResponse])
async def list_comments(post_id: str, user: dict = Depends(get_current_user)):
    return get_post_service().get_comments(post_id)


@router.post("/{post_id}/comments", status_code=201)
async def add_comment(post_id: str, request: CommentCreate, user: dict = Depends(get_current_user)):
    result = get_post_service().add_comment(post_id, user["user_id"], request.content)
    return {
        "success": True,
        "comment": CommentResponse(**result["comment"]),
        "comments_count": result["comments_count"],
    }


@router.delete("/{post_id}/comments/{comment_id}")
async def delete_comment(post_id: str, comment_id: str, user: dict = Depends(get_current_user)):
    comments_count = get_post_service().delete_comment(post_id, comment_id, user["user_id"])
    return {"success": True, "comments_count": comments_count}


@router.post("/{post_id}/comments/{comment_id}/like", response_model=LikeResponse)
async def toggle_comment_like(post_id: str, comment_id: str, user: dict = Depends(get_current_user)):
    return LikeResponse(**get_post_service().toggle_comment_like(post_id, comment_id, user["user_id"]))


@router.websocket("/ws/feed")
async def feed_socket(websocket: WebSocket):
    user = await authenticate_websocket(websocket)
    if not user:
        return
    service = get_post_service()
    await stream_snapshots(websocket, "posts", service.subscribe_to_posts)


@router.websocket("/ws/{post_id}/comments")
async def comments_socket(websocket: WebSocket, post_id: str):
    user = await authenticate_websocket(websocket)
    if not user:
        return
    service = get_post_service()
    try:
        service.get_post(post_id)
    except AppError as e:
        await reject_websocket(websocket, e.detail)
        return
    await stream_snapshots(
        websocket, "comments",
        lambda deliver: service.subscribe_to_comments(post_id, deliver)
    )
