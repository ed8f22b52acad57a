"""Top-level package for the colour vision screening toolkit.

Provides subpackages:
- cvd_toolkit.core – immutable models, errors, seeded randomness, serialisation
- cvd_toolkit.generation – procedural plate generator
- cvd_toolkit.session – trial sequencer and severity estimation
- cvd_toolkit.tuning – filter parameter space, colour filter and adaptive tuner
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.1"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import version as pkg_version
        return pkg_version("cvd_toolkit")
    except Exception:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
