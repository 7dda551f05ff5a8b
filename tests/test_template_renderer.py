from backoffice.models import TemplateDefinition, TemplateType
from backoffice.template_renderer import (
    DEFAULT_TEMPLATES, extract_variables, render, render_text, undeclared_variables,
)


def make_template(subject, body, variables=()):
    return TemplateDefinition(
        name="Test",
        type=TemplateType.BOOKING_REQUEST,
        subject=subject,
        body=body,
        variables=list(variables),
    )


def test_scenario_empty_note_drops_block():
    template = make_template("Hi {{name}}", "{{#if note}}Note: {{note}}{{/if}}", ["name", "note"])
    rendered = render(template, {"name": "Nomad", "note": ""})
    assert rendered.subject == "Hi Nomad"
    assert rendered.body == ""


def test_conditional_blocks_follow_truthiness():
    body = "{{#if a}}A{{/if}}{{#if b}}B{{/if}}"
    assert render_text(body, {"a": "", "b": "x"}) == "B"


def test_block_kept_with_variables_substituted():
    body = "{{#if note}}Note: {{note}}{{/if}}"
    assert render_text(body, {"note": "Vegetarian"}) == "Note: Vegetarian"


def test_missing_condition_key_removes_block():
    assert render_text("x{{#if gone}}hidden{{/if}}y", {}) == "xy"


def test_all_occurrences_replaced():
    assert render_text("{{a}}-{{a}}-{{a}}", {"a": "1"}) == "1-1-1"


def test_none_value_renders_empty():
    assert render_text("[{{a}}]", {"a": None}) == "[]"


def test_unresolved_placeholder_left_verbatim():
    assert render_text("Hi {{name}} from {{company}}", {"name": "Ann"}) == "Hi Ann from {{company}}"


def test_tokens_are_exact_and_case_sensitive():
    context = {"name": "Ann"}
    assert render_text("{{ name }}", context) == "{{ name }}"
    assert render_text("{{Name}}", context) == "{{Name}}"


def test_unclosed_block_is_left_unexpanded():
    text = "start {{#if a}}inner {{x}}"
    assert render_text(text, {"a": "", "x": "X"}) == "start {{#if a}}inner X"


def test_stray_endif_is_literal():
    assert render_text("a{{/if}}b", {}) == "a{{/if}}b"


def test_nested_blocks():
    body = "{{#if a}}A{{#if b}}B{{/if}}!{{/if}}"
    assert render_text(body, {"a": "1", "b": ""}) == "A!"
    assert render_text(body, {"a": "1", "b": "1"}) == "AB!"
    assert render_text(body, {"a": "", "b": "1"}) == ""


def test_subject_gets_no_block_processing():
    template = make_template("{{#if a}}x{{/if}} {{a}}", "")
    assert render(template, {"a": "1"}).subject == "{{#if a}}x{{/if}} 1"


def test_rendering_is_repeatable():
    template = DEFAULT_TEMPLATES[TemplateType.CONFIRMATION]
    context = {name: f"<{name}>" for name in template.variables}
    assert render(template, context) == render(template, context)


def test_default_booking_request_special_requests_block():
    template = DEFAULT_TEMPLATES[TemplateType.BOOKING_REQUEST]
    context = {name: "" for name in template.variables}
    context.update(tourCode="ZZK250828R", supplierName="Movenpick Hotel")

    without = render(template, context)
    assert without.subject == "Provisional Booking Request - ZZK250828R - Movenpick Hotel"
    assert "Special Requests" not in without.body
    assert without.body.startswith("Dear Movenpick Hotel,")

    context["specialRequests"] = "Vegetarian meals required"
    with_requests = render(template, context)
    assert "Special Requests: Vegetarian meals required" in with_requests.body


def test_default_templates_declare_all_variables():
    for template in DEFAULT_TEMPLATES.values():
        assert undeclared_variables(template) == []


def test_extract_variables_in_order():
    text = "{{b}} {{a}} {{#if c}}{{b}}{{/if}} {{ spaced }}"
    assert extract_variables(text) == ["b", "a", "c"]


def test_undeclared_variables():
    template = make_template("{{tourCode}}", "{{clientName}} {{#if note}}{{note}}{{/if}}", ["tourCode"])
    assert undeclared_variables(template) == ["clientName", "note"]
