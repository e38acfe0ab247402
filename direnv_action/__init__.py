"""Install direnv, load a project's .envrc, and export it into a CI job."""

from __future__ import annotations

__version__ = "1.0.0"
