"""
FastAPI Task Backend package.

The application is built by task_api.main.create_app; task_api.main.app is a
ready-made instance configured from environment variables.
"""

__version__ = "0.1.0"
