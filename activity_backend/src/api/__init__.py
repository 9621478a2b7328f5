"""
FastAPI Activity Backend package.

Marks the 'src.api' directory as a Python package. The application instance
lives in src.api.main; importing it here would configure logging and settings
as a side effect of importing any submodule.
"""
