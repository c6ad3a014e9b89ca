from app.features.auth.models.user import User

__all__ = ["User"]
