"""ideagraph: interest page extraction and keyword graph crawling."""

__version__ = "0.1.0"
