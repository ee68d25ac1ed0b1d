"""Browser trivia quiz: question sources, session engine and web app."""

__version__ = "0.1.0"
