"""
Tailoring Prompt Templates

Eight specialists each rewrite one aspect of the candidate document,
guided by the job description and the scoring analysis; the
orchestrator merges their recommendations into one document.
"""

from agentfit.config.settings import Settings
from agentfit.models.agents import TailoringAgentKind
from agentfit.models.replies import (
    AchievementAmplificationReply,
    EducationCertificationsReply,
    ExperienceReframingReply,
    GapMitigationReply,
    IndustryAlignmentReply,
    KeywordOptimizationReply,
    ProfessionalSummaryReply,
    SkillsOptimizationReply,
    TailoringOrchestrationReply,
)
from agentfit.prompts.base import (
    JSON_ONLY_INSTRUCTION,
    PromptTemplate,
    ResponseShape,
    Temperature,
)

TAILORING_VERSION = "2.0.0"

TAILORING_TEMPLATE_IDS: dict[TailoringAgentKind, str] = {
    TailoringAgentKind.SKILLS_OPTIMIZATION: "tailoring-skills-optimization",
    TailoringAgentKind.EXPERIENCE_REFRAMING: "tailoring-experience-reframing",
    TailoringAgentKind.ACHIEVEMENT_AMPLIFICATION: "tailoring-achievement-amplification",
    TailoringAgentKind.KEYWORD_OPTIMIZATION: "tailoring-keyword-optimization",
    TailoringAgentKind.PROFESSIONAL_SUMMARY: "tailoring-professional-summary",
    TailoringAgentKind.EDUCATION_CERTIFICATIONS: "tailoring-education-certifications",
    TailoringAgentKind.GAP_MITIGATION: "tailoring-gap-mitigation",
    TailoringAgentKind.INDUSTRY_ALIGNMENT: "tailoring-industry-alignment",
}

TAILORING_ORCHESTRATION_TEMPLATE_ID = "tailoring-orchestration"

# Shared user template; %(task)s and %(fields)s are filled per agent,
# {placeholders} are filled per request.
AGENT_USER_TEMPLATE = """%(task)s

CURRENT RESUME:
{resume}

JOB DESCRIPTION:
{job_description}

SCORING ANALYSIS:
{scoring_analysis}

USER REQUEST:
{user_request}

Return JSON in this exact format:
{
%(fields)s
}"""


def _system_role(title: str, focus: str, priorities: list[str], closing: str) -> str:
    numbered = "\n".join(f"{i}. {p}" for i, p in enumerate(priorities, start=1))
    return (
        f"You are a {title} specializing in {focus} for resume tailoring.\n\n"
        f"PRIORITIES:\n{numbered}\n\n"
        f"{closing}\n\n"
        f"{JSON_ONLY_INSTRUCTION}"
    )


# kind -> (name, system role, task line, reply fields, reply model, temperature)
_AGENTS = {
    TailoringAgentKind.SKILLS_OPTIMIZATION: (
        "Technical Skills Optimization Agent",
        _system_role(
            "Technical Skills Optimization Agent",
            "technology stack alignment and keyword optimization",
            [
                "Job-specific technology requirements",
                "Skills named in the scoring weaknesses and gaps",
                "ATS keyword coverage",
                "Logical grouping and ordering by relevance",
            ],
            "BE STRATEGIC: Focus on skills that directly address scoring gaps and job requirements.",
        ),
        "Optimize the technical skills section based on job requirements and scoring analysis.",
        '  "optimizedSkillsSection": "skills section with strategic ordering and additions",\n'
        '  "changesMade": ["specific changes and rationale"],\n'
        '  "atsKeywordsAdded": ["technical keywords incorporated"],\n'
        '  "skillsReordered": ["skills reordered by relevance"],\n'
        '  "skillsAdded": ["skills added for the job"],\n'
        '  "skillsRemoved": ["irrelevant skills de-emphasized"],\n'
        '  "gapsAddressed": ["scoring weaknesses addressed"]',
        SkillsOptimizationReply,
        Temperature.BALANCED,
    ),
    TailoringAgentKind.EXPERIENCE_REFRAMING: (
        "Experience Reframing Agent",
        _system_role(
            "Experience Reframing Agent",
            "rewriting professional experience for relevance",
            [
                "Responsibilities that match the job description",
                "Quantified outcomes for each role",
                "Transferable skills for gaps the scoring found",
                "Strong action verbs",
            ],
            "BE TRUTHFUL: Reframe real experience; never invent roles or employers.",
        ),
        "Reframe the professional experience section for this job.",
        '  "enhancedExperienceSection": "rewritten experience section",\n'
        '  "relevanceImprovements": ["how relevance to the job improved"],\n'
        '  "quantificationAdded": ["metrics added to bullet points"],\n'
        '  "transferableSkillsHighlighted": ["transferable skills surfaced"],\n'
        '  "actionVerbsImproved": ["verbs strengthened"],\n'
        '  "gapsAddressed": ["scoring weaknesses addressed"]',
        ExperienceReframingReply,
        Temperature.BALANCED,
    ),
    TailoringAgentKind.ACHIEVEMENT_AMPLIFICATION: (
        "Achievement Amplification Agent",
        _system_role(
            "Achievement Amplification Agent",
            "surfacing measurable business impact",
            [
                "Achievements aligned with the job's success criteria",
                "Metrics for scope, scale and results",
                "Weaknesses the scoring analysis raised",
            ],
            "BE CONCRETE: Every amplified achievement needs a result.",
        ),
        "Amplify the candidate's achievements for this job.",
        '  "amplifiedAchievements": "achievement bullets rewritten with impact",\n'
        '  "impactImprovements": ["how impact was made clearer"],\n'
        '  "metricsAdded": ["metrics introduced"],\n'
        '  "jobAlignedAchievements": ["achievements tied to job requirements"],\n'
        '  "weaknessesAddressed": ["scoring weaknesses addressed"],\n'
        '  "suggestedDevelopmentAreas": ["areas the candidate should develop"]',
        AchievementAmplificationReply,
        Temperature.BALANCED,
    ),
    TailoringAgentKind.KEYWORD_OPTIMIZATION: (
        "ATS Keyword Optimization Agent",
        _system_role(
            "ATS Keyword Optimization Agent",
            "applicant tracking system compatibility",
            [
                "Exact-match phrases from the job description",
                "Standard section headers",
                "Natural keyword density",
            ],
            "BE PRECISE: Keywords must read naturally in context.",
        ),
        "Optimize the resume for applicant tracking systems.",
        '  "atsOptimizedContent": "resume content optimized for ATS parsing",\n'
        '  "keywordsIntegrated": ["keywords integrated"],\n'
        '  "atsCompatibilityImprovements": ["formatting fixes for ATS"],\n'
        '  "sectionHeadersOptimized": ["section headers renamed"],\n'
        '  "keywordDensityOptimized": ["keywords balanced"],\n'
        '  "exactMatchPhrases": ["phrases matched verbatim"]',
        KeywordOptimizationReply,
        Temperature.BALANCED,
    ),
    TailoringAgentKind.PROFESSIONAL_SUMMARY: (
        "Professional Summary Agent",
        _system_role(
            "Professional Summary Agent",
            "positioning statements and personal branding",
            [
                "A value proposition aimed at this role",
                "Differentiators backed by the resume",
                "Key job keywords",
            ],
            "BE COMPELLING: Three to four sentences, no clichés.",
        ),
        "Write a professional summary positioned for this job.",
        '  "professionalSummary": "new professional summary",\n'
        '  "brandPositioning": "how the candidate is positioned",\n'
        '  "keyDifferentiators": ["differentiators emphasized"],\n'
        '  "keywordsIntegrated": ["keywords used"],\n'
        '  "gapsAddressed": ["scoring weaknesses addressed"],\n'
        '  "valueProposition": "one-line value proposition"',
        ProfessionalSummaryReply,
        Temperature.CREATIVE,
    ),
    TailoringAgentKind.EDUCATION_CERTIFICATIONS: (
        "Education & Certifications Agent",
        _system_role(
            "Education & Certifications Agent",
            "presenting academic and professional credentials",
            [
                "Credentials the job requires",
                "Relevant coursework and training",
                "Certifications worth pursuing",
            ],
            "BE HONEST: Recommend certifications; never claim ones the candidate lacks.",
        ),
        "Optimize the education and certifications section for this job.",
        '  "optimizedEducation": "rewritten education section",\n'
        '  "educationPositioning": "how education supports the application",\n'
        '  "certificationRecommendations": ["certifications to pursue"],\n'
        '  "relevantCourseworkHighlighted": ["coursework surfaced"],\n'
        '  "continuingEducationSuggestions": ["learning suggestions"],\n'
        '  "gapsAddressed": ["scoring weaknesses addressed"]',
        EducationCertificationsReply,
        Temperature.BALANCED,
    ),
    TailoringAgentKind.GAP_MITIGATION: (
        "Gap Mitigation Agent",
        _system_role(
            "Gap Mitigation Agent",
            "addressing skill and experience gaps",
            [
                "High-severity gaps from the scoring analysis",
                "Compensating strengths",
                "Narrative that reframes the gap",
            ],
            "BE CONSTRUCTIVE: Mitigate gaps without hiding them.",
        ),
        "Mitigate the gaps identified in the scoring analysis.",
        '  "gapMitigationStrategies": ["strategy per gap"],\n'
        '  "compensatingStrengths": ["strengths that offset gaps"],\n'
        '  "positioningAdjustments": ["positioning changes"],\n'
        '  "contentAdditions": ["content to add"],\n'
        '  "narrativeStrategies": ["storytelling approaches"],\n'
        '  "redFlagsAddressed": ["red flags neutralized"]',
        GapMitigationReply,
        Temperature.BALANCED,
    ),
    TailoringAgentKind.INDUSTRY_ALIGNMENT: (
        "Industry Alignment Agent",
        _system_role(
            "Industry Alignment Agent",
            "industry terminology and cultural fit",
            [
                "Industry-standard terminology",
                "Appropriate level of technical detail",
                "Communication style of the target company",
            ],
            "BE AUTHENTIC: Match the industry voice without jargon overload.",
        ),
        "Align the resume with the target industry.",
        '  "industryAlignedContent": "resume content in the industry voice",\n'
        '  "terminologyUpdates": ["terms updated"],\n'
        '  "culturalAlignment": "how the content fits the culture",\n'
        '  "technicalDetailOptimization": "how technical depth was tuned",\n'
        '  "communicationStyleAdjustments": ["style changes"],\n'
        '  "industryKeywordsAdded": ["industry keywords"]',
        IndustryAlignmentReply,
        Temperature.BALANCED,
    ),
}


class TailoringPrompts:
    """Orchestration prompt for the tailoring roster."""

    ORCHESTRATION = f"""You are the Master Resume Tailoring Orchestration Agent responsible for coordinating all specialized agent recommendations into one cohesive, optimized resume.

CRITICAL REQUIREMENTS:
- MAXIMUM 2 PAGES: Keep the final resume to 2 pages or less
- CONCISE CONTENT: Use bullet points, avoid lengthy paragraphs
- CLEAN FORMAT: Professional markdown with clear sections
- STRATEGIC FOCUS: Only include the most impactful improvements

ORCHESTRATION PRIORITIES:
1. Address highest-impact scoring weaknesses first
2. Resolve conflicts between agent recommendations
3. Keep content consistent across sections
4. Maintain the 2-page maximum length

Never invent employers, titles, dates or credentials.

{JSON_ONLY_INSTRUCTION}"""

    ORCHESTRATION_USER_TEMPLATE = """Coordinate all agent recommendations into a final, optimized resume.

CRITICAL: THE RESUME MUST BE 2 PAGES OR LESS.

ORIGINAL RESUME:
{resume}

JOB DESCRIPTION:
{job_description}

SCORING ANALYSIS:
{scoring_analysis}

ALL AGENT RESULTS:
{agent_results}

USER REQUEST:
{user_request}

Return JSON in this exact format:
{
  "finalTailoredResume": "complete markdown resume (2 pages max)",
  "priorityChanges": ["top 3-5 most impactful changes"],
  "changeSummary": "overview of the modifications and their purpose",
  "expectedScoreImprovements": ["predicted improvements per scoring category"],
  "conflictsResolved": ["how conflicts between agents were resolved"],
  "consistencyImprovements": ["consistency improvements across sections"],
  "readabilityEnhancements": ["readability and formatting improvements"]
}"""


def tailoring_templates(settings: Settings) -> list[PromptTemplate]:
    """Build the eight tailoring templates and the tailoring orchestration template."""
    templates = [
        PromptTemplate(
            id=TAILORING_TEMPLATE_IDS[kind],
            name=name,
            description=task,
            system_role=system_role,
            user_template=AGENT_USER_TEMPLATE % {"task": task, "fields": fields},
            temperature=temperature,
            max_tokens=settings.tailoring_agent_max_tokens,
            response_shape=ResponseShape.JSON,
            response_model=reply_model,
            version=TAILORING_VERSION,
            tags=("tailoring", "agent", kind.value),
        )
        for kind, (name, system_role, task, fields, reply_model, temperature) in _AGENTS.items()
    ]

    templates.append(PromptTemplate(
        id=TAILORING_ORCHESTRATION_TEMPLATE_ID,
        name="Resume Tailoring Orchestration Agent",
        description="Merges every tailoring recommendation into the final document",
        system_role=TailoringPrompts.ORCHESTRATION,
        user_template=TailoringPrompts.ORCHESTRATION_USER_TEMPLATE,
        temperature=Temperature.BALANCED,
        max_tokens=settings.tailoring_orchestration_max_tokens,
        response_shape=ResponseShape.JSON,
        response_model=TailoringOrchestrationReply,
        version=TAILORING_VERSION,
        tags=("tailoring", "orchestration"),
    ))
    return templates
