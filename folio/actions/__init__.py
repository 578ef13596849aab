"""
Server-side actions invoked by the page and admin routes.

Each write action validates its input, performs one store operation and
invalidates the matching cache tag.
"""
