"""Structured-data type vocabulary for Schema Sentry.

This module centralizes the schema.org type names the engines understand.
Keeping it in the domain layer lets services, rulesets and adapters share a
single source of truth without importing each other.
"""

from __future__ import annotations

from enum import Enum

SCHEMA_CONTEXT = "https://schema.org"


class TypeName(str, Enum):
    """Closed set of recognized structured-data categories."""

    ORGANIZATION = "Organization"
    PERSON = "Person"
    PLACE = "Place"
    LOCAL_BUSINESS = "LocalBusiness"
    WEB_SITE = "WebSite"
    WEB_PAGE = "WebPage"
    ARTICLE = "Article"
    BLOG_POSTING = "BlogPosting"
    PRODUCT = "Product"
    VIDEO_OBJECT = "VideoObject"
    IMAGE_OBJECT = "ImageObject"
    EVENT = "Event"
    REVIEW = "Review"
    FAQ_PAGE = "FAQPage"
    HOW_TO = "HowTo"
    BREADCRUMB_LIST = "BreadcrumbList"

    @classmethod
    def parse(cls, value: object) -> "TypeName | None":
        """Return the matching member, or ``None`` for anything unrecognized."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value
