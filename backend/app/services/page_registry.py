"""
Registry of the portal's page paths.

Patterns use `:name` segments for path parameters, e.g.
`/recruiter/job-postings/:id/edit`. Literal segments win over parameter
segments when two patterns match the same path.
"""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Page:
    pattern: str
    name: str
    title: str
    protected: bool = True


@dataclass(frozen=True)
class PageMatch:
    page: Page
    path: str
    params: dict = field(default_factory=dict)


NOT_FOUND_PAGE = Page(pattern="*", name="not-found", title="Page Not Found", protected=False)


def normalize_path(path: str | None) -> str:
    path = (path or "").split("?", 1)[0].split("#", 1)[0].strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


class PageRegistry:
    def __init__(self, pages: list[Page] | None = None):
        self._pages: list[Page] = []
        for page in pages or []:
            self.register(page)

    def register(self, page: Page) -> None:
        if any(p.pattern == page.pattern for p in self._pages):
            raise ValueError(f"Page already registered for {page.pattern}")
        self._pages.append(page)

    @property
    def pages(self) -> list[Page]:
        return list(self._pages)

    def match(self, path: str) -> PageMatch | None:
        path = normalize_path(path)
        wanted = _segments(path)
        best: tuple[int, Page, dict] | None = None
        for page in self._pages:
            params = _match_segments(_segments(page.pattern), wanted)
            if params is None:
                continue
            literal_count = len(wanted) - len(params)
            if best is None or literal_count > best[0]:
                best = (literal_count, page, params)
        if best is None:
            return None
        return PageMatch(page=best[1], path=path, params=best[2])

    def resolve(self, path: str) -> PageMatch:
        """Like `match`, but falls back to the not-found page."""
        found = self.match(path)
        if found is not None:
            return found
        return PageMatch(page=NOT_FOUND_PAGE, path=normalize_path(path))


def _match_segments(pattern: list[str], wanted: list[str]) -> dict | None:
    if len(pattern) != len(wanted):
        return None
    params = {}
    for expected, actual in zip(pattern, wanted):
        if expected.startswith(":"):
            params[expected[1:]] = actual
        elif expected != actual:
            return None
    return params


def default_registry() -> PageRegistry:
    return PageRegistry([
        Page("/auth", "auth", "Sign In", protected=False),
        Page("/", "home", "Home"),
        # Candidate portal
        Page("/candidate/dashboard", "candidate-dashboard", "Dashboard"),
        Page("/candidate/applications", "candidate-applications", "My Applications"),
        Page("/candidate/browse-jobs", "candidate-browse-jobs", "Browse Jobs"),
        Page("/candidate/profile", "candidate-profile", "Profile"),
        Page("/candidate/insights", "candidate-insights", "Career Insights"),
        Page("/candidate/messages", "candidate-messages", "Messages"),
        Page("/candidate/settings", "candidate-settings", "Settings"),
        Page("/candidate/help", "candidate-help", "Help & Support"),
        # Recruiter portal
        Page("/recruiter/dashboard", "recruiter-dashboard", "Dashboard"),
        Page("/recruiter/job-postings", "recruiter-job-postings", "Job Postings"),
        Page("/recruiter/job-postings/new", "recruiter-new-job-posting", "New Job Posting"),
        Page("/recruiter/job-postings/:id/edit", "recruiter-edit-job-posting", "Edit Job Posting"),
        Page("/recruiter/candidates", "recruiter-candidates", "Candidates"),
        Page("/recruiter/analytics", "recruiter-analytics", "Analytics"),
        Page("/recruiter/interviews", "recruiter-interviews", "Interviews"),
        Page("/recruiter/messages", "recruiter-messages", "Messages"),
        Page("/recruiter/settings", "recruiter-settings", "Settings"),
        Page("/recruiter/company-profile", "recruiter-company-profile", "Company Profile"),
        Page("/recruiter/help", "recruiter-help", "Help & Support"),
    ])
