from enum import Enum
from typing import Optional


class ContentClass(Enum):
    HTML = "html"
    OTHER = "other"


def classify(content_type: Optional[str]) -> ContentClass:
    """Pick the rewrite path from the upstream content type. No sniffing."""
    if content_type and "text/html" in content_type.lower():
        return ContentClass.HTML
    return ContentClass.OTHER
