"""
Application package initializer.

The project is organised into small layers: ``core`` (configuration,
logging, security and the JSON collection store), ``schemas`` (record
codecs), ``services`` (domain logic raising domain errors),
``actions`` (result objects for the request layer) and ``api``
(versioned FastAPI routers).
"""

from .main import app  # noqa: F401
