# content/__init__.py
"""
Content services: pet profiles, memorial pages and themes.
"""
