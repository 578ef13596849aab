"""
Fallback content shown when the store is empty or unreachable, and the seed
data written by `seed_database`.
"""

import copy

from shared.constants import PLACEHOLDER_IMAGE
from shared.content import (
    AboutMeData,
    Education,
    Experience,
    NotFoundPageData,
    PortfolioItem,
    SiteSettings,
    Skill,
)

_DEFAULT_PORTFOLIO_ITEMS = [
    PortfolioItem(
        id="default-portfolio-site",
        title="Personal Portfolio",
        description="A server-rendered portfolio and blog with an admin console.",
        long_description=(
            "Content is stored in Firestore and managed from an authenticated "
            "admin area. Pages are rendered on the server and cached by tag."
        ),
        images=[PLACEHOLDER_IMAGE],
        tags=["Python", "FastAPI", "Firebase"],
        repo_url="https://github.com/anandverse/portfolio",
        slug="personal-portfolio",
        data_ai_hint="portfolio website",
    ),
    PortfolioItem(
        id="default-task-tracker",
        title="Task Tracker",
        description="A small kanban board with realtime updates and offline support.",
        images=[PLACEHOLDER_IMAGE],
        tags=["TypeScript", "React", "Firebase"],
        slug="task-tracker",
        data_ai_hint="kanban board",
    ),
]

_DEFAULT_SKILLS = [
    Skill(id="default-python", name="Python", icon_name="FileCode", category="Languages", proficiency=90),
    Skill(id="default-typescript", name="TypeScript", icon_name="FileCode", category="Languages", proficiency=85),
    Skill(id="default-react", name="React", icon_name="Atom", category="Frontend", proficiency=85),
    Skill(id="default-fastapi", name="FastAPI", icon_name="Zap", category="Backend", proficiency=80),
    Skill(id="default-firebase", name="Firebase", icon_name="Flame", category="Backend", proficiency=75),
    Skill(id="default-docker", name="Docker", icon_name="Container", category="DevOps", proficiency=70),
    Skill(id="default-git", name="Git", icon_name="GitBranch", category="Tools", proficiency=90),
]

_DEFAULT_ABOUT_ME = AboutMeData(
    name="Anand",
    title="Full Stack Developer",
    bio=(
        "I build web applications end to end, from data models and APIs to "
        "the pages people actually use."
    ),
    profile_image="https://placehold.co/400x400.png",
    data_ai_hint="developer portrait",
    experience=[
        Experience(
            id="exp1",
            role="Software Engineer",
            company="Tech Corp",
            period="2022 - Present",
            description="Building internal platforms and customer facing web apps.",
        ),
    ],
    education=[
        Education(
            id="edu1",
            degree="B.Tech in Computer Science",
            institution="State University",
            period="2018 - 2022",
        ),
    ],
    email="contact@anandverse.com",
    linkedin_url="https://linkedin.com/in/anandverse",
    github_url="https://github.com/anandverse",
)

_DEFAULT_SITE_SETTINGS = SiteSettings(
    site_name="AnandVerse",
    default_meta_description="Portfolio and blog of a full stack developer.",
    default_meta_keywords="portfolio, web development, blog",
    site_og_image_url="",
    maintenance_mode=False,
    skills_page_meta_title="Skills | AnandVerse",
    skills_page_meta_description="Languages, frameworks and tools I work with.",
)

_DEFAULT_NOT_FOUND_PAGE = NotFoundPageData(
    image_src="https://placehold.co/600x400.png",
    data_ai_hint="lost astronaut",
    heading="Oops! Page Not Found",
    message="The page you are looking for might have been removed or is temporarily unavailable.",
    button_text="Go Back Home",
)


def default_portfolio_items() -> list[PortfolioItem]:
    return copy.deepcopy(_DEFAULT_PORTFOLIO_ITEMS)


def default_skills() -> list[Skill]:
    return copy.deepcopy(_DEFAULT_SKILLS)


def default_about_me() -> AboutMeData:
    return copy.deepcopy(_DEFAULT_ABOUT_ME)


def default_site_settings() -> SiteSettings:
    return copy.deepcopy(_DEFAULT_SITE_SETTINGS)


def default_not_found_page() -> NotFoundPageData:
    return copy.deepcopy(_DEFAULT_NOT_FOUND_PAGE)
