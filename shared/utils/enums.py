from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Department(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    MOBILE = "mobile"
    QA = "qa"
