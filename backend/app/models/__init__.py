# Models package init
# Both models are imported here so relationship() string targets resolve and
# Base.metadata knows every table (Alembic autogenerate, test create_all).
from app.models.bootcamp import Bootcamp
from app.models.course import Course

__all__ = ["Bootcamp", "Course"]
