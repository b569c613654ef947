from .auth import router as auth_router
from .categories import router as category_router
from .comments import router as comment_router
from .likes import router as like_router
from .posts import router as post_router
from .users import router as user_router

routes = [
    auth_router,
    user_router,
    category_router,
    post_router,
    comment_router,
    like_router,
]
