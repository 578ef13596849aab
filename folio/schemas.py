"""
Pydantic schemas for the admin forms, the contact form and the login form.
"""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from folio.security import PHONE_PATTERN, validate_email
from shared.constants import SKILL_CATEGORIES, SKILL_NAMES, SLUG_PATTERN
from shared.content import BlogStatus, TestimonialStatus

SLUG_MESSAGE = "Slug can only contain lowercase letters, numbers, and hyphens."
_HEX_COLOR = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)
_CONTACT_NAME = re.compile(r"^[a-zA-Z\s\-'.]+$")


def flatten_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Turns a ValidationError into {field: [messages]} for the form templates."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "_form"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, []).append(message)
    return errors


def split_csv(value: str) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def is_url(value: str) -> bool:
    parsed = urlparse(value or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _length(value: str, message: str, *, min_length: int = 0, max_length: Optional[int] = None) -> str:
    if len(value) < min_length or (max_length is not None and len(value) > max_length):
        raise ValueError(message)
    return value


def _url_or_blank(value: str, message: str, *, allow_data_url: bool = False) -> str:
    if not value:
        return ""
    if allow_data_url and value.startswith("data:image/"):
        return value
    if not is_url(value):
        raise ValueError(message)
    return value


def _with_scheme(value: str) -> str:
    if value and not re.match(r"^https?://", value, re.IGNORECASE):
        return f"https://{value}"
    return value


def _check_slug(value: str) -> str:
    if not value:
        raise ValueError("Slug is required.")
    if not re.match(SLUG_PATTERN, value):
        raise ValueError(SLUG_MESSAGE)
    return value


class FormModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True)


class PortfolioItemForm(FormModel):
    id: Optional[str] = None
    title: str = ""
    description: str = ""
    long_description: str = ""
    image1: str = ""
    image2: str = ""
    tags_string: str = ""
    live_url: str = ""
    repo_url: str = ""
    slug: str = ""
    data_ai_hint: str = ""
    readme_content: str = ""

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _length(value, "Title must be at least 2 characters.", min_length=2)

    @field_validator("description")
    @classmethod
    def _description(cls, value: str) -> str:
        return _length(value, "Description must be at least 10 characters.", min_length=10)

    @field_validator("image1")
    @classmethod
    def _image1(cls, value: str) -> str:
        return _url_or_blank(
            value,
            "Image 1: Please enter a valid URL or leave blank for default.",
            allow_data_url=True,
        )

    @field_validator("image2")
    @classmethod
    def _image2(cls, value: str) -> str:
        return _url_or_blank(
            value, "Image 2: Please enter a valid URL or leave blank.", allow_data_url=True
        )

    @field_validator("live_url")
    @classmethod
    def _live_url(cls, value: str) -> str:
        return _url_or_blank(
            _with_scheme(value), "Live Demo: Please enter a valid URL or leave blank."
        )

    @field_validator("repo_url")
    @classmethod
    def _repo_url(cls, value: str) -> str:
        return _url_or_blank(
            _with_scheme(value), "Code Repo: Please enter a valid URL or leave blank."
        )

    @field_validator("slug")
    @classmethod
    def _slug(cls, value: str) -> str:
        return _check_slug(value)

    @field_validator("data_ai_hint")
    @classmethod
    def _hint(cls, value: str) -> str:
        return _length(value, "AI hint too long", max_length=50)

    @property
    def tags(self) -> list[str]:
        return split_csv(self.tags_string)


class SkillForm(FormModel):
    id: Optional[str] = None
    name: str = ""
    category: str = ""
    proficiency: Optional[int] = None

    @field_validator("id")
    @classmethod
    def _id(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        if value not in SKILL_NAMES:
            raise ValueError("Please select a valid skill from the list.")
        return value

    @field_validator("category")
    @classmethod
    def _category(cls, value: str) -> str:
        if value not in SKILL_CATEGORIES:
            raise ValueError("Please select a valid category.")
        return value

    @field_validator("proficiency", mode="before")
    @classmethod
    def _blank_proficiency(cls, value):
        if value is None or str(value).strip() == "":
            return None
        try:
            return int(float(str(value).strip()))
        except (ValueError, OverflowError):
            raise ValueError("Proficiency must be between 0 and 100.")

    @field_validator("proficiency")
    @classmethod
    def _proficiency_range(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and not 0 <= value <= 100:
            raise ValueError("Proficiency must be between 0 and 100.")
        return value


class BlogPostForm(FormModel):
    id: Optional[str] = None
    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    featured_image: str = ""
    author: str = ""
    status: BlogStatus = BlogStatus.DRAFT
    tags_string: str = ""
    category: str = ""
    seo_title: str = ""
    seo_description: str = ""
    seo_keywords_string: str = ""

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _length(value, "Title must be at least 5 characters.", min_length=5)

    @field_validator("slug")
    @classmethod
    def _slug(cls, value: str) -> str:
        return _check_slug(value)

    @field_validator("excerpt")
    @classmethod
    def _excerpt(cls, value: str) -> str:
        return _length(value, "Excerpt must be at least 20 characters.", min_length=20)

    @field_validator("content")
    @classmethod
    def _content(cls, value: str) -> str:
        return _length(value, "Content must be at least 100 characters.", min_length=100)

    @field_validator("featured_image")
    @classmethod
    def _featured_image(cls, value: str) -> str:
        return _url_or_blank(
            value, "Please enter a valid URL for the featured image.", allow_data_url=True
        )

    @field_validator("author")
    @classmethod
    def _author(cls, value: str) -> str:
        return _length(value, "Author name is required.", min_length=2)

    @field_validator("category")
    @classmethod
    def _category(cls, value: str) -> str:
        return _length(value, "Category is required.", min_length=1)

    @property
    def tags(self) -> list[str]:
        return split_csv(self.tags_string)

    @property
    def seo_keywords(self) -> list[str]:
        return split_csv(self.seo_keywords_string)


class BlogCategoryForm(FormModel):
    id: Optional[str] = None
    name: str = ""
    slug: str = ""
    description: str = ""
    color: str = ""

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        return _length(value, "Category name must be at least 2 characters.", min_length=2)

    @field_validator("slug")
    @classmethod
    def _slug(cls, value: str) -> str:
        return _check_slug(value)

    @field_validator("color")
    @classmethod
    def _color(cls, value: str) -> str:
        if value and not _HEX_COLOR.match(value):
            raise ValueError("Color must be a valid hex color code.")
        return value


class TestimonialForm(FormModel):
    id: Optional[str] = None
    client_name: str = ""
    client_title: str = ""
    client_company: str = ""
    client_image: str = ""
    content: str = ""
    rating: int = 5
    project_id: str = ""
    status: TestimonialStatus = TestimonialStatus.PENDING

    @field_validator("client_name")
    @classmethod
    def _client_name(cls, value: str) -> str:
        return _length(value, "Client name must be at least 2 characters.", min_length=2)

    @field_validator("client_title")
    @classmethod
    def _client_title(cls, value: str) -> str:
        return _length(value, "Client title is required.", min_length=2)

    @field_validator("client_company")
    @classmethod
    def _client_company(cls, value: str) -> str:
        return _length(value, "Client company is required.", min_length=2)

    @field_validator("client_image")
    @classmethod
    def _client_image(cls, value: str) -> str:
        return _url_or_blank(value, "Please enter a valid URL for the client image.")

    @field_validator("content")
    @classmethod
    def _content(cls, value: str) -> str:
        return _length(
            value, "Testimonial content must be at least 20 characters.", min_length=20
        )

    @field_validator("rating")
    @classmethod
    def _rating(cls, value: int) -> int:
        if not 1 <= value <= 5:
            raise ValueError("Rating must be between 1 and 5.")
        return value


class AnnouncementForm(FormModel):
    message: str = ""

    @field_validator("message")
    @classmethod
    def _message(cls, value: str) -> str:
        if len(value) < 5:
            raise ValueError("Announcement must be at least 5 characters.")
        if len(value) > 500:
            raise ValueError("Announcement must be 500 characters or less.")
        return value


class SiteSettingsForm(FormModel):
    site_name: str = ""
    default_meta_description: str = ""
    default_meta_keywords: str = ""
    site_og_image_url: str = ""
    maintenance_mode: bool = False
    skills_page_meta_title: Optional[str] = None
    skills_page_meta_description: Optional[str] = None

    @field_validator("site_name")
    @classmethod
    def _site_name(cls, value: str) -> str:
        return _length(value, "Site Name must be at least 3 characters.", min_length=3)

    @field_validator("default_meta_description")
    @classmethod
    def _meta_description(cls, value: str) -> str:
        if len(value) < 10:
            raise ValueError("Meta Description must be at least 10 characters.")
        if len(value) > 160:
            raise ValueError("Meta Description should not exceed 160 characters.")
        return value

    @field_validator("site_og_image_url")
    @classmethod
    def _og_image(cls, value: str) -> str:
        return _url_or_blank(
            value, "Please enter a valid URL for the Open Graph image or leave blank."
        )

    @field_validator("skills_page_meta_title")
    @classmethod
    def _skills_title(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if len(value) < 5:
            raise ValueError("Skills page meta title is too short.")
        if len(value) > 70:
            raise ValueError("Skills page meta title is too long.")
        return value

    @field_validator("skills_page_meta_description")
    @classmethod
    def _skills_description(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if len(value) < 10:
            raise ValueError("Skills page meta description is too short.")
        if len(value) > 160:
            raise ValueError("Skills page meta description is too long.")
        return value


class NotFoundPageForm(FormModel):
    image_src: str = ""
    data_ai_hint: str = ""
    heading: str = ""
    message: str = ""
    button_text: str = ""

    @field_validator("image_src")
    @classmethod
    def _image_src(cls, value: str) -> str:
        return _url_or_blank(value, "Please enter a valid URL for the image.")

    @field_validator("data_ai_hint")
    @classmethod
    def _hint(cls, value: str) -> str:
        return _length(value, "AI hint must be 50 characters or less.", max_length=50)

    @field_validator("heading")
    @classmethod
    def _heading(cls, value: str) -> str:
        if len(value) < 5:
            raise ValueError("Heading is too short.")
        if len(value) > 100:
            raise ValueError("Heading is too long.")
        return value

    @field_validator("message")
    @classmethod
    def _message(cls, value: str) -> str:
        if len(value) < 10:
            raise ValueError("Message is too short.")
        if len(value) > 200:
            raise ValueError("Message is too long.")
        return value

    @field_validator("button_text")
    @classmethod
    def _button_text(cls, value: str) -> str:
        if len(value) < 3:
            raise ValueError("Button text is too short.")
        if len(value) > 30:
            raise ValueError("Button text is too long.")
        return value


class ProfileBioForm(FormModel):
    name: str = ""
    title: str = ""
    bio: str = ""
    profile_image: str = ""
    data_ai_hint: str = ""

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        return _length(value, "Name must be at least 2 characters.", min_length=2)

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _length(value, "Title must be at least 5 characters.", min_length=5)

    @field_validator("bio")
    @classmethod
    def _bio(cls, value: str) -> str:
        return _length(value, "Bio must be at least 20 characters.", min_length=20)

    @field_validator("profile_image")
    @classmethod
    def _profile_image(cls, value: str) -> str:
        return _url_or_blank(
            value, "Please enter a valid URL for the profile image.", allow_data_url=True
        )

    @field_validator("data_ai_hint")
    @classmethod
    def _hint(cls, value: str) -> str:
        return _length(value, "AI hint must be 50 characters or less.", max_length=50)


class ExperienceItem(FormModel):
    id: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    period: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class EducationItem(FormModel):
    id: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    institution: str = Field(..., min_length=1)
    period: str = Field(..., min_length=1)


class ExperienceSectionForm(FormModel):
    experience: List[ExperienceItem] = Field(default_factory=list)


class EducationSectionForm(FormModel):
    education: List[EducationItem] = Field(default_factory=list)


class ContactSocialsForm(FormModel):
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin_url: str = ""
    github_url: str = ""
    twitter_url: str = ""

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if value and not validate_email(value):
            raise ValueError("Please enter a valid email.")
        return value

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str) -> str:
        if value and not PHONE_PATTERN.match(value):
            raise ValueError("Please enter a valid phone number.")
        return value

    @field_validator("linkedin_url")
    @classmethod
    def _linkedin(cls, value: str) -> str:
        return _url_or_blank(value, "Please enter a valid LinkedIn URL.")

    @field_validator("github_url")
    @classmethod
    def _github(cls, value: str) -> str:
        return _url_or_blank(value, "Please enter a valid GitHub URL.")

    @field_validator("twitter_url")
    @classmethod
    def _twitter(cls, value: str) -> str:
        return _url_or_blank(value, "Please enter a valid Twitter URL.")


class ContactForm(FormModel):
    name: str = ""
    email: str = ""
    message: str = ""
    phone: Optional[str] = None
    honeypot: str = ""

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters.")
        if len(value) > 100:
            raise ValueError("Name must be less than 100 characters.")
        if not _CONTACT_NAME.match(value):
            raise ValueError("Name contains invalid characters.")
        return value

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if len(value) > 254:
            raise ValueError("Email must be less than 254 characters.")
        if not validate_email(value):
            raise ValueError("Please enter a valid email address.")
        return value

    @field_validator("message")
    @classmethod
    def _message(cls, value: str) -> str:
        if len(value) < 10:
            raise ValueError("Message must be at least 10 characters.")
        if len(value) > 5000:
            raise ValueError("Message must be less than 5000 characters.")
        if "<" in value or ">" in value:
            raise ValueError("Message contains invalid characters.")
        return value

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not PHONE_PATTERN.match(value):
            raise ValueError("Please enter a valid phone number.")
        return value


class LoginForm(FormModel):
    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if not validate_email(value):
            raise ValueError("Please enter a valid email.")
        return value

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        return _length(value, "Password must be at least 6 characters.", min_length=6)
