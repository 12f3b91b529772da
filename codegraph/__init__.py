"""
CodeGraph: project structure graphs, architecture timelines and grounded Q&A.
"""

__version__ = "0.1.0"
