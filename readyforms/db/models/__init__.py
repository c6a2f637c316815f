from readyforms.db.base import Base
from .user import User
from .topic import Topic
from .tag import Tag, TemplateTag
from .template import Template
from .form_response import FormResponse
from .comment import Comment
from .like import Like

__all__ = [
    "Base",
    "User",
    "Topic",
    "Tag",
    "TemplateTag",
    "Template",
    "FormResponse",
    "Comment",
    "Like",
]
