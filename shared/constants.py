"""
Collection names, document ids and form limits used across the site.
"""

# Collections
PORTFOLIO_COLLECTION = "portfolioItems"
SKILLS_COLLECTION = "skills"
APP_CONFIG_COLLECTION = "app_config"
CONTACT_MESSAGES_COLLECTION = "contactMessages"
ANNOUNCEMENTS_COLLECTION = "announcements"
BLOG_POSTS_COLLECTION = "blogPosts"
BLOG_CATEGORIES_COLLECTION = "blogCategories"
TESTIMONIALS_COLLECTION = "testimonials"

# Singleton documents inside APP_CONFIG_COLLECTION
ABOUT_ME_DOC_ID = "aboutMeDoc"
SITE_SETTINGS_DOC_ID = "siteSettingsDoc"
NOT_FOUND_PAGE_DOC_ID = "notFoundPageDoc"

SKILL_CATEGORIES = ("Languages", "Frontend", "Backend", "DevOps", "Tools", "Other")

# Selectable skills and the icon each one renders with.
SKILL_ICONS = {
    "Python": "FileCode",
    "JavaScript": "FileCode",
    "TypeScript": "FileCode",
    "Java": "Coffee",
    "C++": "Cpu",
    "Go": "FileCode",
    "Rust": "Cog",
    "SQL": "Database",
    "HTML": "Code",
    "CSS": "Palette",
    "React": "Atom",
    "Next.js": "Layers",
    "Vue.js": "Layers",
    "Angular": "Layers",
    "Tailwind CSS": "Wind",
    "Node.js": "Server",
    "Express.js": "Server",
    "Django": "Server",
    "Flask": "Server",
    "FastAPI": "Zap",
    "Spring Boot": "Leaf",
    "PostgreSQL": "Database",
    "MongoDB": "Database",
    "Firebase": "Flame",
    "Redis": "Database",
    "Docker": "Container",
    "Kubernetes": "Ship",
    "AWS": "Cloud",
    "Google Cloud": "Cloud",
    "Azure": "Cloud",
    "CI/CD": "Workflow",
    "Linux": "Terminal",
    "Git": "GitBranch",
    "GitHub": "Github",
    "VS Code": "Code2",
    "Figma": "Figma",
    "Postman": "Send",
    "Jira": "Trello",
}
SKILL_NAMES = tuple(SKILL_ICONS)
DEFAULT_SKILL_ICON = "Code"

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

BLOG_STATUSES = ("draft", "published", "archived")
TESTIMONIAL_STATUSES = ("pending", "approved", "featured")

WORDS_PER_MINUTE = 200
MAX_FIELD_LENGTH = 1_000_000
MAX_SANITIZED_LENGTH = 10_000

PLACEHOLDER_IMAGE = "https://placehold.co/600x400.png"
DEFAULT_CATEGORY_COLOR = "#3B82F6"

# Object storage folders
PORTFOLIO_IMAGES_FOLDER = "portfolio-images"
BLOG_IMAGES_FOLDER = "blog-images"
IMAGES_FOLDER = "images"
ADMIN_UPLOADS_FOLDER = "admin-uploads"
TEMP_FOLDER = "temp"
MAX_IMAGE_BYTES = 10 * 1024 * 1024
