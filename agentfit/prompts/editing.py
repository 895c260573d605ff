"""
Editing Prompt Templates

Single-prompt document edits driven by a free-form user request.
"""

from agentfit.config.settings import Settings
from agentfit.models.replies import DocumentEditReply
from agentfit.models.tailoring import EditMode
from agentfit.prompts.base import PromptTemplate, ResponseShape, Temperature

EDITING_TEMPLATE_IDS: dict[EditMode, str] = {
    EditMode.AGENT: "editing-agent",
    EditMode.ASK: "editing-advisor",
    EditMode.PROOFREAD: "editing-proofread",
}


class EditingPrompts:
    """Prompt text for document editing."""

    RESUME_WRITER = """You are an expert resume writer with years of experience helping candidates land roles at leading companies.
You write in clear, professional markdown, keep every fact the candidate gave you and never invent employers, titles, dates or credentials."""

    CAREER_ADVISOR = """You are an experienced career advisor.
You give specific, actionable guidance and explain the reasoning behind each recommendation."""

    AGENT = """You are helping edit a resume based on the user's specific request. Make the requested changes while maintaining professional quality and coherence.

INPUTS:
- User Request: {user_request}
- Current Resume: {resume}

Please make the requested changes to the resume. Focus on:
1. Implementing the specific changes requested
2. Maintaining professional language and formatting
3. Ensuring consistency throughout the document
4. Preserving the overall structure and flow

Respond with:
UPDATED_RESUME:
[The complete updated resume in markdown format]

CHANGE_SUMMARY:
[Brief summary of the specific changes made]"""

    ADVISOR = """You are providing advice about editing a resume. Help the user understand how to make improvements without making the actual changes.

INPUTS:
- Current Resume: {resume}
- User Question: {user_request}

Please provide specific, actionable advice about:
1. What changes would improve the resume
2. How to implement those changes effectively
3. Why these changes would be beneficial
4. Common mistakes to avoid

Provide helpful guidance without modifying the resume content."""

    PROOFREAD = """You are proofreading a resume for grammar, spelling, formatting and clarity issues.

INPUTS:
- User Request: {user_request}
- Current Resume: {resume}

Please review and fix grammar and spelling errors, formatting inconsistencies and punctuation issues.

Respond with:
UPDATED_RESUME:
[The proofread resume in markdown format]

CHANGE_SUMMARY:
[Summary of corrections made]"""


def editing_templates(settings: Settings) -> list[PromptTemplate]:
    return [
        PromptTemplate(
            id=EDITING_TEMPLATE_IDS[EditMode.AGENT],
            name="Resume Editing Agent",
            description="Make the requested changes to the document",
            system_role=EditingPrompts.RESUME_WRITER,
            user_template=EditingPrompts.AGENT,
            temperature=Temperature.BALANCED,
            max_tokens=settings.default_max_tokens,
            response_shape=ResponseShape.SECTIONED,
            response_model=DocumentEditReply,
            tags=("editing", "agent"),
        ),
        PromptTemplate(
            id=EDITING_TEMPLATE_IDS[EditMode.ASK],
            name="Resume Editing Advisor",
            description="Give editing advice without changing the document",
            system_role=EditingPrompts.CAREER_ADVISOR,
            user_template=EditingPrompts.ADVISOR,
            temperature=Temperature.CREATIVE,
            max_tokens=settings.default_max_tokens,
            response_shape=ResponseShape.TEXT,
            tags=("editing", "advisory"),
        ),
        PromptTemplate(
            id=EDITING_TEMPLATE_IDS[EditMode.PROOFREAD],
            name="Resume Proofreading",
            description="Fix grammar, spelling and formatting issues",
            system_role=EditingPrompts.RESUME_WRITER,
            user_template=EditingPrompts.PROOFREAD,
            temperature=Temperature.PRECISE,
            max_tokens=settings.default_max_tokens,
            response_shape=ResponseShape.SECTIONED,
            response_model=DocumentEditReply,
            tags=("editing", "proofreading"),
        ),
    ]
