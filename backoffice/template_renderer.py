"""Supplier e-mail template rendering.

Templates use ``{{name}}`` for substitution and ``{{#if name}} ... {{/if}}``
for conditional blocks. Stored operator templates depend on this syntax, so
it is kept exactly: tokens are case-sensitive, there is no whitespace
tolerance inside ``{{name}}`` and placeholders without a context key are
left in the output untouched.

The template text is parsed into a small tree of text, variable and
conditional nodes before rendering, so conditional blocks may nest. An
``{{#if}}`` that is never closed, and a ``{{/if}}`` that closes nothing,
are emitted verbatim. Rendering never raises.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union

from .models import RenderedMessage, TemplateDefinition, TemplateType

logger = logging.getLogger(__name__)

TAG_RE = re.compile(r"\{\{([^{}]*)\}\}")
IF_RE = re.compile(r"#if\s+(\w+)")
ENDIF = "/if"
IDENTIFIER_RE = re.compile(r"\w+")

RenderContext = Mapping[str, Optional[Union[str, int, float]]]


@dataclass
class Text:
    value: str


@dataclass
class Variable:
    name: str


@dataclass
class Conditional:
    name: str
    tag: str
    children: List["Node"] = field(default_factory=list)


Node = Union[Text, Variable, Conditional]


def parse(text: str, blocks: bool = True) -> List[Node]:
    """Parse template text into a list of nodes.

    With ``blocks=False`` every ``{{...}}`` tag is treated as a variable, so
    ``#if``/``/if`` tags only survive as unresolved placeholders.
    """
    root: List[Node] = []
    stack: List[Conditional] = []

    def current() -> List[Node]:
        return stack[-1].children if stack else root

    pos = 0
    for match in TAG_RE.finditer(text or ""):
        if match.start() > pos:
            current().append(Text(text[pos:match.start()]))
        pos = match.end()
        inner = match.group(1)

        if blocks:
            if_match = IF_RE.fullmatch(inner)
            if if_match:
                stack.append(Conditional(name=if_match.group(1), tag=match.group(0)))
                continue
            if inner == ENDIF:
                if stack:
                    block = stack.pop()
                    current().append(block)
                else:
                    current().append(Text(match.group(0)))
                continue

        current().append(Variable(inner))

    if text and pos < len(text):
        current().append(Text(text[pos:]))

    # Unclosed blocks fall back to their literal text
    while stack:
        block = stack.pop()
        logger.debug(f"Unclosed conditional block: {block.tag}")
        parent = current()
        parent.append(Text(block.tag))
        parent.extend(block.children)

    return root


def _render_nodes(nodes: List[Node], context: RenderContext) -> str:
    out = []
    for node in nodes:
        if isinstance(node, Text):
            out.append(node.value)
        elif isinstance(node, Variable):
            if node.name in context:
                value = context[node.name]
                out.append("" if value is None else str(value))
            else:
                out.append("{{" + node.name + "}}")
        elif context.get(node.name):
            out.append(_render_nodes(node.children, context))
    return "".join(out)


def render_text(text: str, context: RenderContext, blocks: bool = True) -> str:
    """Render a single template string."""
    return _render_nodes(parse(text, blocks=blocks), context)


def render(template: TemplateDefinition, context: RenderContext) -> RenderedMessage:
    """Merge a template with a flat context.

    Conditional blocks are only processed in the body; the subject receives
    variable substitution only.
    """
    return RenderedMessage(
        subject=render_text(template.subject, context, blocks=False),
        body=render_text(template.body, context, blocks=True),
    )


def extract_variables(text: str) -> List[str]:
    """Return the placeholder and condition names used in ``text``, in order."""
    names: List[str] = []

    def walk(nodes: List[Node]):
        for node in nodes:
            if isinstance(node, Variable):
                if IDENTIFIER_RE.fullmatch(node.name) and node.name not in names:
                    names.append(node.name)
            elif isinstance(node, Conditional):
                if node.name not in names:
                    names.append(node.name)
                walk(node.children)

    walk(parse(text))
    return names


def undeclared_variables(template: TemplateDefinition) -> List[str]:
    """Names used in subject/body that are missing from ``template.variables``."""
    used = extract_variables(template.subject)
    for name in extract_variables(template.body):
        if name not in used:
            used.append(name)
    declared = set(template.variables)
    return [name for name in used if name not in declared]


_SIGNATURE = """Best regards,
Nomad Tours
Tel: +27 21 845 6310
Email: nicholas@nomadtours.co.za"""

DEFAULT_TEMPLATES: Dict[TemplateType, TemplateDefinition] = {
    TemplateType.BOOKING_REQUEST: TemplateDefinition(
        name="Provisional Booking Request",
        type=TemplateType.BOOKING_REQUEST,
        subject="Provisional Booking Request - {{tourCode}} - {{supplierName}}",
        body=f"""Dear {{{{supplierName}}}},

Our client has provisionally confirmed the following tour and we would like to request provisional booking:

Tour Code: {{{{tourCode}}}}
Client: {{{{clientName}}}}
Check-in: {{{{checkIn}}}}
Check-out: {{{{checkOut}}}}
Pax: {{{{paxCount}}}}
Room Type: {{{{roomType}}}}
Room Configuration: {{{{roomConfiguration}}}}
Meal Plan: {{{{mealPlan}}}}

{{{{#if specialRequests}}}}
Special Requests: {{{{specialRequests}}}}
{{{{/if}}}}

Please confirm availability and provide confirmation number. This is a provisional booking pending final client confirmation.

{_SIGNATURE}""",
        variables=[
            "tourCode", "supplierName", "clientName", "checkIn", "checkOut",
            "paxCount", "roomType", "roomConfiguration", "mealPlan", "specialRequests",
        ],
    ),
    TemplateType.CONFIRMATION: TemplateDefinition(
        name="Final Booking Confirmation",
        type=TemplateType.CONFIRMATION,
        subject="Final Booking Confirmation - {{tourCode}} - {{confirmationNumber}}",
        body=f"""Dear {{{{supplierName}}}},

Our client has made final payment and we are confirming the following booking:

Tour Code: {{{{tourCode}}}}
Confirmation Number: {{{{confirmationNumber}}}}
Client: {{{{clientName}}}}
Check-in: {{{{checkIn}}}}
Check-out: {{{{checkOut}}}}
Pax: {{{{paxCount}}}}
Room Type: {{{{roomType}}}}
Room Configuration: {{{{roomConfiguration}}}}
Meal Plan: {{{{mealPlan}}}}

{{{{#if specialRequests}}}}
Special Requests: {{{{specialRequests}}}}
{{{{/if}}}}

This booking is now confirmed and guaranteed. We look forward to working with you.

{_SIGNATURE}""",
        variables=[
            "tourCode", "supplierName", "confirmationNumber", "clientName",
            "checkIn", "checkOut", "paxCount", "roomType", "roomConfiguration",
            "mealPlan", "specialRequests",
        ],
    ),
    TemplateType.RELEASE: TemplateDefinition(
        name="Booking Release",
        type=TemplateType.RELEASE,
        subject="Booking Release - {{tourCode}} - {{confirmationNumber}}",
        body="""Dear {{supplierName}},

Please release the following booking:

Tour Code: {{tourCode}}
Confirmation Number: {{confirmationNumber}}
Client: {{clientName}}
Check-in: {{checkIn}}
Check-out: {{checkOut}}

{{#if releaseReason}}
Reason: {{releaseReason}}
{{/if}}

Thank you for your understanding.

Best regards,
Nomad Tours""",
        variables=[
            "tourCode", "supplierName", "confirmationNumber", "clientName",
            "checkIn", "checkOut", "releaseReason",
        ],
    ),
}
