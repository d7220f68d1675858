"""AI-citation readiness rules.

These checks look for the fields answer engines need to attribute and quote a
page: authorship, freshness dates, descriptions and Q&A/step structure.
"""

from __future__ import annotations

from types import MappingProxyType

from core.domain.schema_types import TypeName
from core.interfaces.rule import RuleCheck
from core.rules.checks import (
    ListItemsHaveKeys,
    RequiredField,
    RequiredNestedField,
    error,
    warn,
)


def _authorship(namespace: str) -> tuple[RuleCheck, ...]:
    """Rules shared by Article and BlogPosting."""

    return (
        RequiredNestedField(
            "author",
            "name",
            error(f"ai.{namespace}.author.name", "author.name required for AI citation"),
            missing_parent=error(f"ai.{namespace}.author", "author required for AI citation and attribution"),
        ),
        RequiredField(
            "datePublished",
            error(
                f"ai.{namespace}.datepublished",
                "datePublished required for AI to understand content freshness",
            ),
        ),
        RequiredField(
            "description",
            warn(
                f"ai.{namespace}.description",
                "description recommended for better AI context understanding",
            ),
        ),
    )


AI_CITATION_RULES: MappingProxyType[TypeName, tuple[RuleCheck, ...]] = MappingProxyType(
    {
        TypeName.ARTICLE: _authorship("article"),
        TypeName.BLOG_POSTING: _authorship("blogposting"),
        TypeName.ORGANIZATION: (
            RequiredField(
                "description",
                warn("ai.organization.description", "description recommended for AI to understand organization"),
            ),
            RequiredField("url", error("ai.organization.url", "url required for AI to link to organization")),
        ),
        TypeName.PRODUCT: (
            RequiredField(
                "description",
                error("ai.product.description", "description required for AI to understand product"),
            ),
            RequiredField(
                "offers",
                warn("ai.product.offers", "offers recommended for AI to understand pricing and availability"),
            ),
        ),
        TypeName.FAQ_PAGE: (
            ListItemsHaveKeys(
                "mainEntity",
                ("name", "acceptedAnswer"),
                warn("ai.faq.qaformat", "Each FAQ should have question (name) and answer (acceptedAnswer)"),
                missing=error("ai.faq.mainentity", "mainEntity required for AI to extract Q&A content"),
                allow_empty=True,
            ),
        ),
        TypeName.HOW_TO: (
            ListItemsHaveKeys(
                "step",
                ("text",),
                warn("ai.howto.steptxt", "Each step should have 'text' for AI extraction"),
                missing=error("ai.howto.step", "step required for AI to extract procedural content"),
            ),
        ),
        TypeName.VIDEO_OBJECT: (
            RequiredField(
                "description",
                error("ai.video.description", "description required for AI to understand video content"),
            ),
            RequiredField(
                "uploadDate",
                warn("ai.video.uploaddate", "uploadDate recommended for AI to understand video recency"),
            ),
        ),
        TypeName.EVENT: (
            RequiredField("startDate", error("ai.event.startdate", "startDate required for AI to understand event timing")),
            RequiredField("location", error("ai.event.location", "location required for AI to understand event venue")),
        ),
        TypeName.LOCAL_BUSINESS: (
            RequiredField(
                "geo",
                warn("ai.localbusiness.geo", "geo (latitude/longitude) recommended for AI location features"),
            ),
            RequiredField(
                "openingHours",
                warn("ai.localbusiness.openinghours", "openingHours recommended for AI to provide business hours"),
            ),
        ),
        TypeName.WEB_SITE: (
            RequiredField("url", error("ai.website.url", "url required for AI to identify the website")),
        ),
        TypeName.WEB_PAGE: (
            RequiredField(
                "datePublished",
                warn("ai.webpage.datepublished", "datePublished recommended for AI to understand page freshness"),
            ),
        ),
        TypeName.PERSON: (
            RequiredField("url", warn("ai.person.url", "url recommended for AI to link to person profile")),
        ),
    }
)
