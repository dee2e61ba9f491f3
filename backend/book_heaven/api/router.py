from fastapi import APIRouter
from book_heaven.api import books, notifications, offers, progress, sell_posts, users

api_router = APIRouter()
api_router.include_router(users.router, tags=["users"])
api_router.include_router(books.router, tags=["books"])
api_router.include_router(sell_posts.router, tags=["sell-posts"])
api_router.include_router(offers.router, tags=["offers"])
api_router.include_router(progress.router, tags=["progress"])
api_router.include_router(notifications.router, tags=["notifications"])
