## Hand-maintained fallback resources per plan category
from typing import Dict, List

from learnstream.plans.schemas import CandidateResource

CURATED_RESOURCES: Dict[str, List[dict]] = {
    "frontend": [
        {"title": "MDN Web Docs", "url": "https://developer.mozilla.org/en-US/docs/Learn", "type": "documentation"},
        {"title": "web.dev Learn", "url": "https://web.dev/learn", "type": "course"},
        {"title": "JavaScript.info", "url": "https://javascript.info/", "type": "tutorial"},
        {"title": "React documentation", "url": "https://react.dev/learn", "type": "documentation"},
        {"title": "freeCodeCamp", "url": "https://www.freecodecamp.org/learn", "type": "course"},
    ],
    "backend": [
        {"title": "The Twelve-Factor App", "url": "https://12factor.net/", "type": "article"},
        {"title": "Node.js Learn", "url": "https://nodejs.org/en/learn", "type": "documentation"},
        {"title": "FastAPI tutorial", "url": "https://fastapi.tiangolo.com/tutorial/", "type": "tutorial"},
        {"title": "System Design Primer", "url": "https://github.com/donnemartin/system-design-primer", "type": "github"},
        {"title": "HTTP on MDN", "url": "https://developer.mozilla.org/en-US/docs/Web/HTTP", "type": "documentation"},
    ],
    "mobile": [
        {"title": "Android Developers: Courses", "url": "https://developer.android.com/courses", "type": "course"},
        {"title": "Apple SwiftUI tutorials", "url": "https://developer.apple.com/tutorials/swiftui", "type": "tutorial"},
        {"title": "Flutter documentation", "url": "https://docs.flutter.dev/", "type": "documentation"},
        {"title": "React Native docs", "url": "https://reactnative.dev/docs/getting-started", "type": "documentation"},
    ],
    "design": [
        {"title": "Laws of UX", "url": "https://lawsofux.com/", "type": "article"},
        {"title": "Material Design", "url": "https://m3.material.io/", "type": "documentation"},
        {"title": "Nielsen Norman Group articles", "url": "https://www.nngroup.com/articles/", "type": "article"},
        {"title": "Figma Learn", "url": "https://help.figma.com/hc/en-us/categories/360002051613", "type": "tutorial"},
    ],
    "ai": [
        {"title": "fast.ai Practical Deep Learning", "url": "https://course.fast.ai/", "type": "course"},
        {"title": "scikit-learn user guide", "url": "https://scikit-learn.org/stable/user_guide.html", "type": "documentation"},
        {"title": "Hugging Face Learn", "url": "https://huggingface.co/learn", "type": "course"},
        {"title": "PyTorch tutorials", "url": "https://pytorch.org/tutorials/", "type": "tutorial"},
        {"title": "3Blue1Brown: Neural networks", "url": "https://www.youtube.com/@3blue1brown", "type": "video"},
    ],
    "devops": [
        {"title": "Docker: Get started", "url": "https://docs.docker.com/get-started/", "type": "tutorial"},
        {"title": "Kubernetes basics", "url": "https://kubernetes.io/docs/tutorials/kubernetes-basics/", "type": "tutorial"},
        {"title": "GitHub Actions documentation", "url": "https://docs.github.com/en/actions", "type": "documentation"},
        {"title": "Terraform tutorials", "url": "https://developer.hashicorp.com/terraform/tutorials", "type": "tutorial"},
    ],
    "database": [
        {"title": "PostgreSQL tutorial", "url": "https://www.postgresql.org/docs/current/tutorial.html", "type": "documentation"},
        {"title": "SQLBolt", "url": "https://sqlbolt.com/", "type": "tutorial"},
        {"title": "Use The Index, Luke", "url": "https://use-the-index-luke.com/", "type": "article"},
        {"title": "MongoDB University", "url": "https://learn.mongodb.com/", "type": "course"},
    ],
    "other": [
        {"title": "freeCodeCamp", "url": "https://www.freecodecamp.org/learn", "type": "course"},
        {"title": "MIT OpenCourseWare", "url": "https://ocw.mit.edu/", "type": "course"},
        {"title": "Khan Academy: Computing", "url": "https://www.khanacademy.org/computing", "type": "course"},
    ],
}


def curated_resources(category: str, table: Dict[str, List[dict]] | None = None) -> List[CandidateResource]:
    """Curated entries for an exact category key; unknown categories get an empty list."""
    entries = (CURATED_RESOURCES if table is None else table).get(category, [])
    return [CandidateResource.model_validate(e) for e in entries]
