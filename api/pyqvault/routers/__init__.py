# This file makes the routers directory a Python package
from . import (
    auth,
    colleges,
    dashboard,
    files,
    health,
    saved_files,
    search,
)
