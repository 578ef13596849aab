"""
Content types and helpers shared by the web app and the operational scripts.
"""
