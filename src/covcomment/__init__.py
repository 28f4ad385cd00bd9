"""covcomment: turn coverage text summaries into PR-ready HTML reports."""

__version__ = "0.1.0"
