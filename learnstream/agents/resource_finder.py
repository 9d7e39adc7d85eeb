from typing import List

from learnstream.agents.llm.base import LLMClient
from learnstream.agents.parsing import parse_json_list
from learnstream.plans.schemas import CandidateResource, PlanContext, Step

SYSTEM_RESOURCE_FINDER = """You are a research librarian for technology learners.
Suggest real, publicly reachable learning resources only.
Prefer official documentation, well-known tutorials, reputable courses,
GitHub repositories and specific YouTube videos.
Return ONLY a valid JSON array (no markdown, no code fences, no commentary).
"""

RESOURCE_TYPES = "documentation|tutorial|video|course|article|github|tool|other"


def build_resource_prompt(step: Step, context: PlanContext, min_count: int = 5, max_count: int = 7) -> str:
    levels = ""
    if context.current_skill_level or context.target_skill_level:
        levels = f"\nLearner level: {context.current_skill_level or 'unspecified'} -> {context.target_skill_level or 'unspecified'}"

    return f"""
Learning plan: "{context.title}" (category: {context.category}){levels}

Step: {step.title}
What the learner studies here: {step.description or step.title}

Suggest {min_count}-{max_count} resources for this step. Return ONLY a JSON array:
[
  {{"title": "Resource title", "url": "https://...", "type": "{RESOURCE_TYPES}"}}
]

Rules:
- Every url must be a full https:// link to a specific page.
- Do not invent URLs; prefer stable, well-known sites.
- For videos, link to a specific video or a channel page.
""".strip()


async def find_resources(llm: LLMClient, step: Step, context: PlanContext, *,
                         min_count: int = 5, max_count: int = 7) -> List[CandidateResource]:
    prompt = build_resource_prompt(step, context, min_count, max_count)
    raw_text = await llm.generate_text(system=SYSTEM_RESOURCE_FINDER, user=prompt, temperature=0.3)
    return parse_json_list(raw_text, CandidateResource)[:max_count]
