# learnstream/agents/workflow.py
import logging
from typing import List, Sequence

from learnstream.agents.llm.base import LLMClient
from learnstream.agents.parsing import parse_json_list
from learnstream.errors import GenerationFailed
from learnstream.plans.schemas import PlanSpec, StepDraft

logger = logging.getLogger(__name__)


SYSTEM_PLANNER = """You are a curriculum planner for technology and programming topics.

You must return ONLY a valid JSON array (no markdown, no code fences, no commentary).
"""


def build_learning_path_prompt(spec: PlanSpec, min_steps: int = 8, max_steps: int = 12) -> str:
    goal = spec.learning_goal or f"Learn {spec.title}"
    return f"""
Create a learning path for "{spec.title}" ({spec.category}).
Current skill level: {spec.current_skill_level}
Target skill level: {spec.target_skill_level}
Learning goal: {goal}

Generate {min_steps}-{max_steps} learning steps. Return ONLY a valid JSON array:
[
  {{"title": "Step title", "description": "What to learn in this step", "estimatedTime": "2-3 hours"}}
]

Make steps progressive, from fundamentals to advanced topics.
""".strip()


def build_extension_prompt(title: str, existing_titles: Sequence[str], count: int) -> str:
    existing = ", ".join(existing_titles) or "none yet"
    return f"""
The user is learning "{title}" and has these existing steps: {existing}

Generate {count} MORE advanced steps to continue their learning. Return ONLY a valid JSON array:
[
  {{"title": "Step title", "description": "What to learn", "estimatedTime": "2-3 hours"}}
]

Make these steps build on the existing knowledge and go deeper into advanced topics.
Do not repeat existing steps.
""".strip()


def fallback_steps(title: str) -> List[StepDraft]:
    return [
        StepDraft(
            title=f"Introduction to {title}",
            description=f"Get started with {title} fundamentals",
            estimated_time="2-3 hours",
        ),
        StepDraft(
            title="Core Concepts",
            description=f"Learn the essential concepts of {title}",
            estimated_time="3-4 hours",
        ),
        StepDraft(
            title="Hands-on Practice",
            description="Apply what you've learned with practical exercises",
            estimated_time="4-5 hours",
        ),
    ]


async def _generate_steps(llm: LLMClient, user_prompt: str, *, min_steps: int, max_steps: int,
                          attempts: int = 3) -> List[StepDraft]:
    base_prompt = user_prompt
    last_err: Exception | None = None

    for attempt in range(1, attempts + 1):
        raw_text = await llm.generate_text(system=SYSTEM_PLANNER, user=user_prompt, temperature=0.2)

        try:
            steps = parse_json_list(raw_text, StepDraft)
            if len(steps) < min_steps:
                raise GenerationFailed(f"Expected at least {min_steps} steps, got {len(steps)}")
            return steps[:max_steps]
        except GenerationFailed as e:
            last_err = e
            logger.info("step generation attempt %d/%d rejected: %s", attempt, attempts, e)

        # Build repair prompt with detailed error info
        user_prompt = f"""
{base_prompt}

PREVIOUS ATTEMPT FAILED:
Error: {last_err}

Invalid output:
{raw_text}

Return ONLY the corrected JSON array, no extra keys, no markdown.
""".strip()

    raise GenerationFailed(f"Step output did not validate after retries. Last error: {last_err}")


async def generate_learning_path(llm: LLMClient, spec: PlanSpec, *, min_steps: int = 8,
                                 max_steps: int = 12) -> List[StepDraft]:
    prompt = build_learning_path_prompt(spec, min_steps, max_steps)
    return await _generate_steps(llm, prompt, min_steps=min_steps, max_steps=max_steps)


async def generate_additional_steps(llm: LLMClient, title: str, existing_titles: Sequence[str],
                                    count: int) -> List[StepDraft]:
    prompt = build_extension_prompt(title, existing_titles, count)
    return await _generate_steps(llm, prompt, min_steps=1, max_steps=count)
