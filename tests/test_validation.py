from __future__ import annotations

from conftest import make_node

from core.services.validation import validate_nodes, validate_schema


def _rule_ids(issues):
    return [issue.rule_id for issue in issues]


def test_empty_node_list_is_an_error():
    result = validate_schema([])
    assert not result.ok
    assert result.score == 90
    assert _rule_ids(result.issues) == ["schema.empty"]
    assert result.issues[0].path == "root"


def test_valid_article_has_no_issues(article_node):
    result = validate_schema([article_node], recommended=True)
    assert result.ok
    assert result.score == 100
    assert result.issues == []


def test_context_and_type_checks():
    issues = validate_nodes([{"@type": "Spaceship"}])
    assert _rule_ids(issues) == ["schema.context", "schema.type"]
    assert issues[0].path == "nodes[0].@context"


def test_required_fields_per_type():
    issues = validate_nodes([make_node("Product", name="Widget")])
    assert _rule_ids(issues) == ["schema.required.description", "schema.required.url"]
    assert issues[1].path == "nodes[0].url"


def test_author_accepts_string_or_named_object():
    base = {"headline": "Hello world", "datePublished": "2024-01-01", "url": "https://example.com"}
    assert validate_nodes([make_node("Article", author="Jane", **base)]) == []
    assert validate_nodes([make_node("Article", author={"name": "Jane"}, **base)]) == []
    issues = validate_nodes([make_node("Article", author={"name": "  "}, **base)])
    assert _rule_ids(issues) == ["schema.required.author"]


def test_list_fields_must_be_non_empty():
    issues = validate_nodes([make_node("FAQPage", mainEntity=[])])
    assert _rule_ids(issues) == ["schema.required.mainEntity"]
    assert issues[0].message == "FAQPage must include at least one Question"


def test_recommended_fields_only_when_enabled():
    node = make_node("Organization", name="Acme")
    assert validate_nodes([node]) == []
    issues = validate_nodes([node], recommended=True)
    assert _rule_ids(issues) == ["schema.recommended.url", "schema.recommended.logo"]
    assert all(issue.severity.value == "warn" for issue in issues)


def test_breadcrumb_items_are_checked():
    node = make_node(
        "BreadcrumbList",
        itemListElement=[
            {"position": 1, "item": "https://example.com/"},
            {"position": 0, "item": "/relative"},
            {"position": 3, "item": {"@id": "https://example.com/c"}},
            "not-an-object",
        ],
    )
    issues = validate_nodes([node])
    assert _rule_ids(issues) == [
        "schema.breadcrumb.position",
        "schema.breadcrumb.item.url",
        "schema.breadcrumb.item",
    ]
    assert issues[0].path == "nodes[0].itemListElement[1].position"
    assert issues[2].path == "nodes[0].itemListElement[3]"


def test_numbers_count_as_present():
    node = make_node("Event", name="Launch", startDate=0)
    assert validate_nodes([node]) == []
