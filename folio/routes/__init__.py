"""
HTTP routers: public pages, admin console, SEO artifacts and the JSON API.
"""
