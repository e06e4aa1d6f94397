"""
Pytest configuration for Django tests.
"""
import os

# pytest-django reads DJANGO_SETTINGS_MODULE from pyproject.toml; keep a
# default for runs that bypass it.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'storefront.settings')
