"""Google rich-result eligibility rules."""

from __future__ import annotations

from types import MappingProxyType

from core.domain.schema_types import TypeName
from core.interfaces.rule import RuleCheck
from core.rules.checks import (
    AnyOfFields,
    LengthRange,
    ListItemsHaveKeys,
    NonEmptyList,
    RequiredField,
    RequiredNestedField,
    error,
    warn,
)


def _required_for(type_label: str, field: str) -> RequiredField:
    return RequiredField(
        field,
        error(
            f"google.{type_label.lower()}.{field.lower()}",
            f"{field} required for {type_label} rich results",
        ),
    )


GOOGLE_RULES: MappingProxyType[TypeName, tuple[RuleCheck, ...]] = MappingProxyType(
    {
        TypeName.ORGANIZATION: (
            RequiredField(
                "logo",
                warn(
                    "google.organization.logo",
                    "Organization logo recommended for Google Knowledge Graph",
                ),
            ),
            NonEmptyList(
                "sameAs",
                warn(
                    "google.organization.sameas",
                    "sameAs links recommended for Google Knowledge Graph verification",
                ),
            ),
        ),
        TypeName.LOCAL_BUSINESS: (
            _required_for("LocalBusiness", "telephone"),
            _required_for("LocalBusiness", "address"),
            RequiredField(
                "openingHours",
                warn(
                    "google.localbusiness.openinghours",
                    "openingHours recommended for LocalBusiness rich results",
                ),
            ),
        ),
        TypeName.PRODUCT: (
            RequiredNestedField(
                "offers",
                "price",
                error("google.product.price", "price in offers required for Product rich results"),
                missing_parent=error("google.product.offers", "offers required for Product rich results"),
            ),
            RequiredNestedField(
                "offers",
                "availability",
                warn("google.product.availability", "availability recommended for Product rich results"),
            ),
            _required_for("Product", "image"),
        ),
        TypeName.ARTICLE: (
            _required_for("Article", "image"),
            LengthRange("headline", 10, 110, rule_id="google.article.headline"),
            _required_for("Article", "datePublished"),
        ),
        TypeName.BLOG_POSTING: (
            _required_for("BlogPosting", "image"),
            _required_for("BlogPosting", "datePublished"),
        ),
        TypeName.VIDEO_OBJECT: (
            _required_for("VideoObject", "thumbnailUrl"),
            _required_for("VideoObject", "uploadDate"),
            RequiredField(
                "duration",
                warn(
                    "google.videoobject.duration",
                    "duration (ISO 8601 format) recommended for VideoObject rich results",
                ),
            ),
        ),
        TypeName.EVENT: (
            _required_for("Event", "startDate"),
            _required_for("Event", "location"),
        ),
        TypeName.FAQ_PAGE: (
            ListItemsHaveKeys(
                "mainEntity",
                ("name", "acceptedAnswer"),
                warn(
                    "google.faq.mainentity",
                    "Each FAQ question should have name and acceptedAnswer for rich results",
                ),
            ),
        ),
        TypeName.HOW_TO: (
            AnyOfFields(
                ("supplies", "tools"),
                warn("google.howto.supplies", "supplies or tools recommended for HowTo rich results"),
            ),
        ),
        TypeName.REVIEW: (
            RequiredNestedField(
                "reviewRating",
                "ratingValue",
                error("google.review.ratingvalue", "ratingValue required in reviewRating for rich results"),
                missing_parent=error("google.review.rating", "reviewRating required for Review rich results"),
            ),
        ),
    }
)
