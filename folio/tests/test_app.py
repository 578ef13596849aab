import os
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from folio.app import create_app
from folio.config import get_settings
from folio.dependencies import get_auth_client, get_store, reset_dependencies
from folio.security import limiter
from shared.constants import (
    APP_CONFIG_COLLECTION,
    BLOG_POSTS_COLLECTION,
    CONTACT_MESSAGES_COLLECTION,
    PORTFOLIO_COLLECTION,
    SITE_SETTINGS_DOC_ID,
)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "hunter22"


class AppTestCase(unittest.TestCase):
    env = {}

    def setUp(self):
        environ = {
            "FOLIO_USE_IN_MEMORY_BACKENDS": "1",
            "SESSION_SECRET": "test-secret",
            "SITE_URL": "https://folio.test",
            "ADMIN_EMAILS": "",
        }
        environ.update(self.env)
        patcher = mock.patch.dict(os.environ, environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        get_settings.cache_clear()
        self.addCleanup(get_settings.cache_clear)
        reset_dependencies()
        self.addCleanup(reset_dependencies)
        limiter.reset()

        self.client = TestClient(create_app(), base_url="https://testserver")
        self.store = get_store()

    def add_post(self, doc_id, slug, status="published", category="Engineering", tags=None):
        self.store.set(
            BLOG_POSTS_COLLECTION,
            doc_id,
            {
                "title": slug.replace("-", " ").title(),
                "slug": slug,
                "excerpt": "An excerpt long enough to show.",
                "content": "# Heading\n\nBody text.",
                "status": status,
                "category": category,
                "tags": tags or [],
                "publishedAt": "2024-05-01T10:00:00+00:00",
                "views": 0,
            },
        )

    def login(self, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, next_path="/admin/dashboard"):
        return self.client.post(
            "/admin/login",
            data={"email": email, "password": password, "next": next_path},
            follow_redirects=False,
        )


class PublicPageTests(AppTestCase):
    def test_home_page_renders_with_defaults(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("AnandVerse", response.text)
        self.assertEqual(response.headers["X-Frame-Options"], "DENY")
        self.assertIn("Content-Security-Policy", response.headers)

    def test_static_pages(self):
        for path in ("/about", "/portfolio", "/blog", "/skills", "/contact", "/privacy", "/terms", "/cookies"):
            self.assertEqual(self.client.get(path).status_code, 200, path)

    def test_portfolio_detail(self):
        self.store.set(
            PORTFOLIO_COLLECTION,
            "p1",
            {"title": "Weather App", "slug": "weather-app", "description": "Forecasts.", "readmeContent": "## Setup"},
        )
        response = self.client.get("/portfolio/weather-app")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Weather App", response.text)
        self.assertIn("<h2", response.text)

    def test_missing_portfolio_item_renders_not_found_page(self):
        response = self.client.get("/portfolio/nope")
        self.assertEqual(response.status_code, 404)
        self.assertIn("Oops! Page Not Found", response.text)

    def test_unknown_path_renders_not_found_page(self):
        response = self.client.get("/definitely/not/here")
        self.assertEqual(response.status_code, 404)
        self.assertIn("Oops! Page Not Found", response.text)

    def test_blog_post_views_and_drafts(self):
        self.add_post("b1", "hello-world")
        self.add_post("b2", "secret-draft", status="draft")

        response = self.client.get("/blog/hello-world")
        self.assertEqual(response.status_code, 200)
        self.assertIn("<h1", response.text)
        self.client.get("/blog/hello-world")
        self.assertEqual(self.store.get(BLOG_POSTS_COLLECTION, "b1")["views"], 2)

        self.assertEqual(self.client.get("/blog/secret-draft").status_code, 404)
        self.assertNotIn("Secret Draft", self.client.get("/blog").text)

    def test_blog_filters_are_case_insensitive(self):
        self.add_post("b1", "python-tips", category="Engineering", tags=["Python"])
        self.add_post("b2", "life-notes", category="Life")

        text = self.client.get("/blog", params={"category": "engineering"}).text
        self.assertIn("Python Tips", text)
        self.assertNotIn("Life Notes", text)

        text = self.client.get("/blog", params={"tag": "python"}).text
        self.assertIn("Python Tips", text)
        self.assertNotIn("Life Notes", text)


class ContactFormTests(AppTestCase):
    def test_successful_submission_redirects_with_toast(self):
        response = self.client.post(
            "/contact",
            data={"name": "Ada Lovelace", "email": "ada@example.com", "message": "Let us build something."},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/contact")
        self.assertEqual(len(self.store.list(CONTACT_MESSAGES_COLLECTION)), 1)

        page = self.client.get("/contact")
        self.assertIn("Your message has been sent successfully!", page.text)
        # Toasts are shown once.
        self.assertNotIn("Your message has been sent successfully!", self.client.get("/contact").text)

    def test_invalid_submission_rerenders_form(self):
        response = self.client.post(
            "/contact",
            data={"name": "Ada", "email": "not-an-email", "message": "Hello there friend"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid email address.", response.text)
        self.assertIn('value="Ada"', response.text)
        self.assertEqual(self.store.list(CONTACT_MESSAGES_COLLECTION), [])

    def test_honeypot(self):
        response = self.client.post(
            "/contact",
            data={"name": "Bot", "email": "bot@example.com", "message": "Buy cheap stuff now", "honeypot": "x"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid submission detected.", response.text)

    def test_rate_limit(self):
        data = {"name": "Ada", "email": "bad", "message": "Hello there friend"}
        statuses = [self.client.post("/contact", data=data).status_code for _ in range(6)]
        self.assertEqual(statuses[:5], [400] * 5)
        self.assertEqual(statuses[5], 429)


class MaintenanceModeTests(AppTestCase):
    def setUp(self):
        super().setUp()
        self.store.set(
            APP_CONFIG_COLLECTION,
            SITE_SETTINGS_DOC_ID,
            {"siteName": "Folio", "defaultMetaDescription": "Projects.", "maintenanceMode": True},
        )

    def test_public_pages_return_503(self):
        for path in ("/", "/blog", "/no/such/page"):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 503, path)
            self.assertIn("undergoing scheduled maintenance", response.text)

    def test_admin_api_and_seo_stay_available(self):
        self.assertEqual(self.client.get("/admin/login").status_code, 200)
        self.assertEqual(self.client.get("/api/health").status_code, 200)
        self.assertEqual(self.client.get("/robots.txt").status_code, 200)


class ApiTests(AppTestCase):
    def test_health(self):
        self.assertEqual(self.client.get("/api/health").json(), {"status": "ok"})

    def test_data_uses_camel_case(self):
        self.add_post("b1", "hello-world")
        payload = self.client.get("/api/data").json()
        self.assertEqual(payload["siteSettings"]["siteName"], "AnandVerse")
        self.assertEqual(payload["blogPosts"][0]["slug"], "hello-world")
        self.assertIn("readTime", payload["blogPosts"][0])
        self.assertEqual(payload["portfolioItems"], [])

    def test_active_announcement(self):
        self.assertEqual(self.client.get("/api/announcements/active").json(), {"announcement": None})

    def test_unknown_api_path_is_json(self):
        response = self.client.get("/api/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"detail": "Not Found"})


class SeoRouteTests(AppTestCase):
    def test_sitemap_lists_published_posts(self):
        self.add_post("b1", "hello-world")
        self.add_post("b2", "secret-draft", status="draft")
        response = self.client.get("/sitemap.xml")
        self.assertEqual(response.status_code, 200)
        self.assertIn("application/xml", response.headers["content-type"])
        self.assertIn("<loc>https://folio.test/blog/hello-world</loc>", response.text)
        self.assertNotIn("secret-draft", response.text)

    def test_robots(self):
        response = self.client.get("/robots.txt")
        self.assertIn("Disallow: /admin/", response.text)
        self.assertIn("Sitemap: https://folio.test/sitemap.xml", response.text)

    def test_feed(self):
        response = self.client.get("/feed.xml")
        self.assertIn("application/rss+xml", response.headers["content-type"])
        self.assertIn("Welcome to AnandVerse Blog", response.text)


class AdminAuthTests(AppTestCase):
    def setUp(self):
        super().setUp()
        get_auth_client().add_user(ADMIN_EMAIL, ADMIN_PASSWORD)

    def test_unauthenticated_requests_redirect_to_login(self):
        response = self.client.get("/admin/dashboard", follow_redirects=False)
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/admin/login?next=/admin/dashboard")

    def test_login_sets_session_cookie(self):
        response = self.login()
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/admin/dashboard")
        cookie = response.headers["set-cookie"]
        self.assertIn("__session=", cookie)
        self.assertIn("HttpOnly", cookie)

        dashboard = self.client.get("/admin/dashboard")
        self.assertEqual(dashboard.status_code, 200)
        self.assertIn(f"Welcome back, {ADMIN_EMAIL}", dashboard.text)

    def test_wrong_password(self):
        response = self.login(password="wrong-password")
        self.assertEqual(response.status_code, 401)
        self.assertIn("Invalid email or password. Please try again.", response.text)

    def test_short_password_fails_validation(self):
        response = self.login(password="123")
        self.assertEqual(response.status_code, 400)
        self.assertIn("Password must be at least 6 characters.", response.text)

    def test_external_next_is_ignored(self):
        response = self.login(next_path="https://evil.example/steal")
        self.assertEqual(response.headers["location"], "/admin/dashboard")

    def test_logout(self):
        self.login()
        response = self.client.post("/admin/logout", follow_redirects=False)
        self.assertEqual(response.headers["location"], "/admin/login")
        response = self.client.get("/admin/dashboard", follow_redirects=False)
        self.assertEqual(response.status_code, 303)


class AdminAllowListTests(AppTestCase):
    env = {"ADMIN_EMAILS": "owner@example.com"}

    def test_only_allow_listed_accounts_can_sign_in(self):
        get_auth_client().add_user(ADMIN_EMAIL, ADMIN_PASSWORD)
        get_auth_client().add_user("owner@example.com", ADMIN_PASSWORD)

        response = self.login()
        self.assertEqual(response.status_code, 401)
        self.assertIn("not authorized", response.text)

        response = self.login(email="owner@example.com")
        self.assertEqual(response.status_code, 303)


class AdminContentTests(AppTestCase):
    def setUp(self):
        super().setUp()
        get_auth_client().add_user(ADMIN_EMAIL, ADMIN_PASSWORD)
        self.login()

    def test_admin_pages_render(self):
        for path in (
            "/admin/portfolio",
            "/admin/portfolio/new",
            "/admin/skills",
            "/admin/blog",
            "/admin/blog/new",
            "/admin/blog/categories",
            "/admin/announcements",
            "/admin/testimonials",
            "/admin/about",
            "/admin/settings",
            "/admin/messages",
        ):
            self.assertEqual(self.client.get(path).status_code, 200, path)

    def test_create_portfolio_item(self):
        response = self.client.post(
            "/admin/portfolio",
            data={
                "title": "Weather App",
                "description": "Forecasts for every city.",
                "slug": "weather-app",
            },
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/admin/portfolio")
        listing = self.client.get("/admin/portfolio")
        self.assertIn("Portfolio item &#34;Weather App&#34; added successfully!", listing.text)
        self.assertEqual(self.client.get("/portfolio/weather-app").status_code, 200)

    def test_invalid_portfolio_item(self):
        response = self.client.post(
            "/admin/portfolio", data={"title": "W", "description": "short", "slug": "x"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Title must be at least 2 characters.", response.text)

    def test_publishing_announcement_shows_banner(self):
        self.client.post("/admin/announcements", data={"message": "New site is live!"})
        self.assertIn("New site is live!", self.client.get("/").text)

    def test_experience_rows(self):
        response = self.client.post(
            "/admin/about/experience",
            data={
                "experience-0-role": "Engineer",
                "experience-0-company": "Acme",
                "experience-0-period": "2020 - 2023",
                "experience-0-description": "Built APIs.",
                "experience-1-role": "",
                "experience-1-company": "",
                "experience-1-period": "",
                "experience-1-description": "",
            },
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 303)
        about = self.store.get(APP_CONFIG_COLLECTION, "aboutMeDoc")
        self.assertEqual([entry["company"] for entry in about["experience"]], ["Acme"])

    def test_seed_and_clear_cache(self):
        self.client.post("/admin/settings/seed")
        self.assertEqual(len(self.store.list(PORTFOLIO_COLLECTION)), 2)
        self.client.get("/")
        response = self.client.post("/admin/settings/clear-cache")
        self.assertIn("Cache cleared (", response.text)

    def test_message_inbox(self):
        self.client.post(
            "/contact",
            data={"name": "Ada Lovelace", "email": "ada@example.com", "message": "Let us build something."},
        )
        [(message_id, _)] = self.store.list(CONTACT_MESSAGES_COLLECTION)
        self.client.post(f"/admin/messages/{message_id}/read")
        self.assertTrue(self.store.get(CONTACT_MESSAGES_COLLECTION, message_id)["isRead"])
        self.client.post(f"/admin/messages/{message_id}/delete")
        self.assertEqual(self.store.list(CONTACT_MESSAGES_COLLECTION), [])


if __name__ == "__main__":
    unittest.main()
