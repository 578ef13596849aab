"""
Dataclasses for every kind of content the site stores.

Documents are persisted camelCase (see `shared.json_utils`); use
`from_document` / `to_document` to move between the two shapes.
"""

from dataclasses import asdict, dataclass, field, fields
from enum import StrEnum
from typing import List, Optional, Type, TypeVar

from dacite import Config, from_dict

from shared.json_utils import convert_keys

T = TypeVar("T")


class BlogStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class TestimonialStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    FEATURED = "featured"


@dataclass
class PortfolioItem:
    id: str = ""
    title: str = "Untitled Project"
    description: str = ""
    long_description: str = ""
    images: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    live_url: str = ""
    repo_url: str = ""
    slug: str = ""
    data_ai_hint: str = ""
    readme_content: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Skill:
    id: str = ""
    name: str = "Unknown Skill"
    icon_name: str = "Code"
    category: str = "Other"
    proficiency: Optional[int] = None


@dataclass
class Experience:
    id: str = ""
    role: str = ""
    company: str = ""
    period: str = ""
    description: str = ""


@dataclass
class Education:
    id: str = ""
    degree: str = ""
    institution: str = ""
    period: str = ""


@dataclass
class AboutMeData:
    name: str = ""
    title: str = ""
    bio: str = ""
    profile_image: str = ""
    data_ai_hint: str = ""
    experience: List[Experience] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    twitter_url: Optional[str] = None


@dataclass
class SiteSettings:
    site_name: str = ""
    default_meta_description: str = ""
    default_meta_keywords: Optional[str] = None
    site_og_image_url: Optional[str] = None
    maintenance_mode: bool = False
    skills_page_meta_title: Optional[str] = None
    skills_page_meta_description: Optional[str] = None


@dataclass
class NotFoundPageData:
    image_src: str = ""
    data_ai_hint: str = ""
    heading: str = ""
    message: str = ""
    button_text: str = ""


@dataclass
class ContactMessage:
    id: str = ""
    name: str = "N/A"
    email: str = "N/A"
    message: str = ""
    phone: Optional[str] = None
    submitted_at: Optional[str] = None
    is_read: bool = False
    is_replied: bool = False
    read_at: Optional[str] = None
    replied_at: Optional[str] = None


@dataclass
class BlogPost:
    id: str = ""
    title: str = "Untitled Post"
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    featured_image: str = ""
    author: str = "Admin"
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
    status: BlogStatus = BlogStatus.DRAFT
    tags: List[str] = field(default_factory=list)
    category: str = "General"
    read_time: int = 5
    views: int = 0
    likes: int = 0
    seo_title: str = ""
    seo_description: str = ""
    seo_keywords: List[str] = field(default_factory=list)


@dataclass
class BlogCategory:
    id: str = ""
    name: str = "Unnamed Category"
    slug: str = ""
    description: str = ""
    color: str = "#3B82F6"
    post_count: int = 0


@dataclass
class Testimonial:
    id: str = ""
    client_name: str = "Anonymous"
    client_title: str = ""
    client_company: str = ""
    client_image: str = ""
    content: str = ""
    rating: int = 5
    project_id: Optional[str] = None
    status: TestimonialStatus = TestimonialStatus.PENDING
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Announcement:
    id: str = ""
    message: str = ""
    is_active: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class AppData:
    portfolio_items: List[PortfolioItem]
    skills: List[Skill]
    about_me: AboutMeData
    site_settings: SiteSettings
    not_found_page: NotFoundPageData
    blog_posts: List[BlogPost]
    blog_categories: List[BlogCategory]
    testimonials: List[Testimonial]
    announcements: List[Announcement]


_DACITE_CONFIG = Config(check_types=False, cast=[StrEnum])


def from_document(data_class: Type[T], doc_id: Optional[str], data: dict) -> T:
    """
    Builds a dataclass from a stored camelCase document.

    Keys the dataclass does not know are dropped, missing or null keys fall
    back to the field default.
    """
    snake = convert_keys(data or {}, "camel_to_snake")
    known = {f.name for f in fields(data_class)}
    payload = {key: value for key, value in snake.items() if key in known and value is not None}
    if doc_id is not None and "id" in known:
        payload["id"] = doc_id
    return from_dict(data_class=data_class, data=payload, config=_DACITE_CONFIG)


def to_document(obj) -> dict:
    """Serializes a dataclass to a camelCase document without its id."""
    data = asdict(obj)
    data.pop("id", None)
    return convert_keys(data, "snake_to_camel")
