"""swiprep - prepare a SWI-Prolog style source checkout for building

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Fail fast with helpful guidance

swiprep brings the git submodules of a checkout up to date, fetches the
generated documentation bundle matching the VERSION file, and regenerates
stale autoconf ``configure`` scripts so the tree can be built.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
