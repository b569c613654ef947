import enum


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class PostStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class LikeType(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"
